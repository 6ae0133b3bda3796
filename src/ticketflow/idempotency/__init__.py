"""Idempotency store and request fingerprinting."""

from ticketflow.idempotency.codec import decode_result, encode_result, fingerprint
from ticketflow.idempotency.store import (
    IdempotencyRecord,
    IdempotencyStore,
    InMemoryIdempotencyStore,
    JsonFileIdempotencyStore,
)

__all__ = [
    "IdempotencyRecord",
    "IdempotencyStore",
    "InMemoryIdempotencyStore",
    "JsonFileIdempotencyStore",
    "decode_result",
    "encode_result",
    "fingerprint",
]
