"""Inference engine (model) registration models.

Mirrors the payload of the kolosal server's ``POST /models`` endpoint.
Defaults match the dashboard's "add model" form: CPU llama engine, 4k
context, loaded immediately.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ModelType(str, Enum):  # noqa: UP042
    """Kinds of model an engine can serve."""

    LLM = "llm"
    EMBEDDING = "embedding"


class LoadingParameters(BaseModel):
    """llama.cpp-style loading knobs forwarded verbatim to the server."""

    model_config = ConfigDict(frozen=True)

    n_ctx: int = 4096
    n_keep: int = 0
    n_batch: int = 512
    n_ubatch: int = 512
    n_parallel: int = 1
    n_gpu_layers: int = 0
    use_mmap: bool = True
    use_mlock: bool = False
    cont_batching: bool = False
    warmup: bool = True


class AddEngineRequest(BaseModel):
    """Register (and optionally load) a model on the kolosal server."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: str = Field(..., min_length=1)
    model_path: str = Field(..., min_length=1)
    model_type: ModelType = ModelType.LLM
    inference_engine: str = "llama-cpu"
    main_gpu_id: int = -1
    load_immediately: bool = True
    loading_parameters: LoadingParameters = Field(default_factory=LoadingParameters)


def infer_model_type(model_id: str, tags: list[str] | None = None) -> ModelType:
    """Guess the model type from a repository id and its tags.

    Anything mentioning "embedding" is an embedding model; the rest are LLMs.
    """
    haystack = [model_id, *(tags or [])]
    if any("embedding" in item.lower() for item in haystack):
        return ModelType.EMBEDDING
    return ModelType.LLM


def engine_id_from_repo(repo_id: str) -> str:
    """Turn a ``owner/name`` repository id into a server-safe engine id."""
    return repo_id.replace("/", "_", 1)
