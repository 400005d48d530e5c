"""
HelpingAI SDK - Models API

Model listing and lookup. The catalog of known models ships with the
SDK so lookups keep working when the models endpoint is unreachable.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Dict, List

from .errors import HAIError, ModelNotFoundError
from .types import Model

if TYPE_CHECKING:
    from .async_client import AsyncHAI
    from .client import HAI


logger = logging.getLogger(__name__)


BUILTIN_MODELS: Dict[str, Model] = {
    "Helpingai3-raw": Model(
        id="Helpingai3-raw",
        name="HelpingAI3 Raw",
        description=(
            "Advanced language model with enhanced emotional intelligence, "
            "trained on emotional dialogues, therapeutic exchanges, and crisis "
            "response scenarios"
        ),
    ),
    "Dhanishtha-2.0-preview": Model(
        id="Dhanishtha-2.0-preview",
        name="Dhanishtha-2.0 Preview",
        description=(
            "Intermediate thinking model with multi-phase reasoning, "
            "self-correction capabilities, and structured emotional reasoning (SER)"
        ),
    ),
}


def builtin_models() -> List[Model]:
    """Copies of the built-in catalog entries."""
    return [replace(model) for model in BUILTIN_MODELS.values()]


def models_from_response(response: Any) -> List[Model]:
    """Map a /models response to Model entries."""
    if isinstance(response, dict):
        response = response.get("data")
    if not isinstance(response, list):
        return []
    models = []
    for item in response:
        if isinstance(item, str):
            models.append(Model.from_id(item))
        elif isinstance(item, dict) and item.get("id"):
            models.append(Model(
                id=item["id"],
                name=item.get("name") or item["id"],
                description=item.get("description"),
                version=item.get("version"),
            ))
    return models


def _not_found(model_id: str) -> ModelNotFoundError:
    available = ", ".join(BUILTIN_MODELS)
    return ModelNotFoundError(f"Model '{model_id}' not found. Available models: {available}")


class Models:
    """
    Models API interface.

    Usage:
        client.models.list()
        client.models.retrieve("Dhanishtha-2.0-preview")
    """

    def __init__(self, client: HAI):
        self._client = client

    def list(self) -> List[Model]:
        """
        List available models.

        Falls back to the built-in catalog if the request fails.
        """
        try:
            response = self._client._request_with_retry("GET", "/models", auth_required=False)
        except HAIError as e:
            logger.warning("Model listing failed, using built-in catalog: %s", e)
            return builtin_models()
        return models_from_response(response)

    def retrieve(self, model_id: str) -> Model:
        """
        Retrieve a specific model.

        Raises:
            ModelNotFoundError: If neither the catalog nor the API knows the model
        """
        if model_id in BUILTIN_MODELS:
            return replace(BUILTIN_MODELS[model_id])

        for model in self.list():
            if model.id == model_id:
                return model

        raise _not_found(model_id)


class AsyncModels:
    """Async version of Models."""

    def __init__(self, client: AsyncHAI):
        self._client = client

    async def list(self) -> List[Model]:
        """List available models asynchronously."""
        try:
            response = await self._client._request_with_retry(
                "GET", "/models", auth_required=False
            )
        except HAIError as e:
            logger.warning("Model listing failed, using built-in catalog: %s", e)
            return builtin_models()
        return models_from_response(response)

    async def retrieve(self, model_id: str) -> Model:
        """Retrieve a specific model asynchronously."""
        if model_id in BUILTIN_MODELS:
            return replace(BUILTIN_MODELS[model_id])

        for model in await self.list():
            if model.id == model_id:
                return model

        raise _not_found(model_id)
