"""Inference engine management proxied to the kolosal server."""

from __future__ import annotations

from typing import Any

import structlog

from kolosal_console.models.engines import AddEngineRequest, engine_id_from_repo, infer_model_type
from kolosal_console.models.status import InferenceStatus
from kolosal_console.providers.kolosal.kolosal_client import KolosalServerClient
from kolosal_console.utils.logging import get_logger


class EngineService:
    """List, register and remove inference engines."""

    def __init__(self, client: KolosalServerClient) -> None:
        self._client = client
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def list_engines(self) -> InferenceStatus:
        """Return the server status, which carries the engine list."""
        payload = await self._client.status()
        return InferenceStatus.model_validate(payload)

    async def add_engine(self, request: AddEngineRequest) -> dict[str, Any]:
        self._logger.info(
            "engine_add_requested",
            model_id=request.model_id,
            model_type=request.model_type.value,
            inference_engine=request.inference_engine,
        )
        result = await self._client.add_model(request.model_dump(mode="json"))
        self._logger.info("engine_added", model_id=request.model_id)
        return result

    async def remove_engine(self, engine_id: str) -> dict[str, Any]:
        await self._client.remove_model(engine_id)
        self._logger.info("engine_removed", engine_id=engine_id)
        return {"success": True, "message": "Engine removed successfully"}

    async def add_from_repository(
        self,
        repo_id: str,
        model_path: str,
        tags: list[str] | None = None,
    ) -> dict[str, Any]:
        """Register a model downloaded from a hub repository.

        The engine id is derived from *repo_id* and the model type is
        guessed from the id and *tags*; every other field uses the
        defaults of :class:`AddEngineRequest`.
        """
        request = AddEngineRequest(
            model_id=engine_id_from_repo(repo_id),
            model_path=model_path,
            model_type=infer_model_type(repo_id, tags),
        )
        return await self.add_engine(request)
