"""Tagged JSON encoding for recorded activity results.

Persistent stores must hand back the same typed value the activity produced,
so every result is written as ``{"type": <tag>, ...}``.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from pydantic import BaseModel

from ticketflow.models import (
    ClassificationResult,
    ErrorKind,
    KnowledgeMatch,
    OperationError,
    Ticket,
)

_MODEL_TAGS: dict[str, type[BaseModel]] = {
    "classification": ClassificationResult,
    "ticket": Ticket,
}


def encode_result(value: object) -> dict[str, Any]:
    if value is None:
        return {"type": "unit"}
    if isinstance(value, OperationError):
        return {"type": "error", "kind": value.kind.value, "message": value.message}
    if isinstance(value, str):
        return {"type": "text", "value": value}
    if isinstance(value, tuple) and all(isinstance(item, KnowledgeMatch) for item in value):
        return {
            "type": "knowledge_matches",
            "value": [item.model_dump(mode="json") for item in value],
        }
    for tag, model in _MODEL_TAGS.items():
        if isinstance(value, model):
            return {"type": tag, "value": value.model_dump(mode="json")}
    raise TypeError(f"Cannot encode activity result of type {type(value).__name__}")


def decode_result(raw: dict[str, Any]) -> object:
    tag = raw.get("type")
    if tag == "unit":
        return None
    if tag == "error":
        return OperationError(kind=ErrorKind(raw["kind"]), message=str(raw["message"]))
    if tag == "text":
        return str(raw["value"])
    if tag == "knowledge_matches":
        return tuple(KnowledgeMatch.model_validate(item) for item in raw["value"])
    model = _MODEL_TAGS.get(str(tag))
    if model is None:
        raise ValueError(f"Unknown activity result tag: {tag!r}")
    return model.model_validate(raw["value"])


def _default(value: object) -> object:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    raise TypeError(f"Cannot fingerprint value of type {type(value).__name__}")


def fingerprint(**params: object) -> str:
    """Signature of an activity's input parameters.

    Canonical JSON (sorted keys, compact separators) hashed with SHA-256, so
    two calls fingerprint equal exactly when their parameters are equal.
    """

    canonical = json.dumps(params, sort_keys=True, separators=(",", ":"), default=_default)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
