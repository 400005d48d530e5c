"""HelpingAI SDK version."""

__version__ = "1.1.2"
