"""Idempotency store: per-activity record of key -> (fingerprint, result).

The store is the only synchronization point between concurrent workflow
executions. For a given ``(activity, key)`` at most one ``compute`` runs at a
time; callers queued behind it observe its recorded result.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TypeVar

from filelock import FileLock
from pydantic import BaseModel

from ticketflow.idempotency.codec import decode_result, encode_result
from ticketflow.models import ErrorKind, OperationError

logger = logging.getLogger(__name__)

R = TypeVar("R")


class IdempotencyRecord(BaseModel):
    """Outcome recorded for one ``(activity, key)``."""

    activity: str
    key: str
    fingerprint: str
    result: Any = None
    recorded_at: str


def _utc_iso_now() -> str:
    return datetime.now(tz=UTC).isoformat()


@dataclass
class _KeyLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class IdempotencyStore(ABC):
    """Base class implementing the record-or-fetch contract.

    Backends only provide record lookup and persistence. Failed outcomes
    returned by ``compute`` are recorded like any other result; the store
    never retries. An exception raised by ``compute`` (cancellation, timeout)
    records nothing, so the next caller with the same key computes again.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        # Only keys with a caller in flight have an entry.
        self._key_locks: dict[tuple[str, str], _KeyLock] = {}

    @abstractmethod
    def _load_record(self, activity: str, key: str) -> IdempotencyRecord | None:
        """Return the record for ``(activity, key)``, if any."""

    @abstractmethod
    def _save_record(self, record: IdempotencyRecord) -> None:
        """Persist ``record``; never called twice for the same key."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every record."""

    @contextmanager
    def _exclusive(self, activity: str, key: str) -> Iterator[None]:
        """Hold ``(activity, key)`` against every other caller of this store."""

        slot = (activity, key)
        with self._guard:
            entry = self._key_locks.setdefault(slot, _KeyLock())
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._key_locks[slot]

    def get(self, activity: str, key: str) -> IdempotencyRecord | None:
        with self._exclusive(activity, key):
            return self._load_record(activity, key)

    def record_or_fetch(
        self,
        activity: str,
        key: str,
        fingerprint: str,
        compute: Callable[[], R],
    ) -> R | OperationError:
        """Return the recorded result for ``key`` or compute and record it.

        Args:
            activity: Namespace of the key (the activity name).
            key: Caller-supplied idempotency key.
            fingerprint: Signature of the request parameters.
            compute: Performs the effect; invoked at most once per key.

        Returns:
            The recorded (or freshly computed) result, or an
            ``IdempotencyMismatch`` error when ``key`` was already recorded
            with a different fingerprint.
        """

        with self._exclusive(activity, key):
            existing = self._load_record(activity, key)
            if existing is not None:
                if existing.fingerprint != fingerprint:
                    logger.error(
                        "Idempotency key reused with different parameters",
                        extra={"activity": activity, "idempotency_key": key},
                    )
                    return OperationError(
                        kind=ErrorKind.IDEMPOTENCY_MISMATCH,
                        message=(
                            f"Idempotency key {key!r} for {activity} "
                            "was used with different parameters"
                        ),
                    )
                logger.debug(
                    "Idempotency cache hit",
                    extra={"activity": activity, "idempotency_key": key},
                )
                return existing.result

            result = compute()
            self._save_record(
                IdempotencyRecord(
                    activity=activity,
                    key=key,
                    fingerprint=fingerprint,
                    result=result,
                    recorded_at=_utc_iso_now(),
                )
            )
            return result


class InMemoryIdempotencyStore(IdempotencyStore):
    """Process-local store; records live as long as the instance."""

    def __init__(self) -> None:
        super().__init__()
        self._records: dict[tuple[str, str], IdempotencyRecord] = {}

    def _load_record(self, activity: str, key: str) -> IdempotencyRecord | None:
        return self._records.get((activity, key))

    def _save_record(self, record: IdempotencyRecord) -> None:
        self._records[(record.activity, record.key)] = record

    def clear(self) -> None:
        with self._guard:
            self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


class JsonFileIdempotencyStore(IdempotencyStore):
    """JSON-file backed store that survives process restarts.

    Several stores (in one process or in many) may share a file. Exclusion
    per ``(activity, key)`` spans processes through a lock file per key under
    ``<path>.locks/``, held from lookup until the result is saved. Reads and
    writes of the state file itself are serialized by ``<path>.lock``.

    The file maps activity -> key -> record, written with the tagged codec so
    results load back as the same types. Every lookup parses the whole file
    and every save rewrites it through a fresh temporary file, so the cost
    grows with the number of records; this backend suits local runs and
    small deployments, not high-volume hosts. Per-key lock files are left in
    place after use.
    """

    def __init__(self, path: Path) -> None:
        super().__init__()
        self._path = path
        self._locks_dir = path.with_name(path.name + ".locks")
        self._file_lock = FileLock(str(path.with_name(path.name + ".lock")))

    @property
    def path(self) -> Path:
        return self._path

    @contextmanager
    def _exclusive(self, activity: str, key: str) -> Iterator[None]:
        digest = hashlib.sha256(f"{activity}\0{key}".encode()).hexdigest()[:32]
        self._locks_dir.mkdir(parents=True, exist_ok=True)
        key_lock = FileLock(str(self._locks_dir / f"{digest}.lock"))
        with super()._exclusive(activity, key), key_lock:
            yield

    def _read_unlocked(self) -> dict[str, dict[str, dict[str, Any]]]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            raise ValueError(f"Idempotency store file is not valid JSON: {self._path}") from None
        if not isinstance(raw, dict):
            raise ValueError(f"Idempotency store file has unexpected shape: {self._path}")
        return raw

    def _write_unlocked(self, items: dict[str, dict[str, dict[str, Any]]]) -> None:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self._path.parent,
            prefix=f"{self._path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            json.dump(items, tmp, indent=2, ensure_ascii=False)
            tmp.write("\n")
        try:
            os.replace(tmp.name, self._path)
        except OSError:
            Path(tmp.name).unlink(missing_ok=True)
            raise

    def _load_record(self, activity: str, key: str) -> IdempotencyRecord | None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._file_lock:
            items = self._read_unlocked()
        item = items.get(activity, {}).get(key)
        if item is None:
            return None
        return IdempotencyRecord(
            activity=activity,
            key=key,
            fingerprint=str(item["fingerprint"]),
            result=decode_result(item["result"]),
            recorded_at=str(item.get("recorded_at", "")),
        )

    def _save_record(self, record: IdempotencyRecord) -> None:
        payload = {
            "fingerprint": record.fingerprint,
            "result": encode_result(record.result),
            "recorded_at": record.recorded_at,
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._file_lock:
            items = self._read_unlocked()
            items.setdefault(record.activity, {})[record.key] = payload
            self._write_unlocked(items)
        logger.debug(
            "Idempotency record persisted",
            extra={"activity": record.activity, "idempotency_key": record.key},
        )

    def clear(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._file_lock:
            self._path.unlink(missing_ok=True)
