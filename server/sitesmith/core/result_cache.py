# sitesmith/core/result_cache.py
"""
Content-addressed cache for recovered generation results.

Identical requests (same parameters, any field order) hash to the same key,
so a hit skips the model call entirely. Only successful recoveries are
written; a failed recovery is retried fresh next time. There is no eviction
and no single-flight: concurrent misses for one key may each call the model
and the last write wins.
"""
import hashlib
import json
import logging
import os
import re
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

from pydantic import ValidationError

from sitesmith.core.recovery import (
    RecoveredDocument,
    RecoveryResult,
    RecoveryStage,
    recover_document,
)
from sitesmith.utils.config import CACHE_DIR, CACHE_ENABLED, CACHE_NAMESPACE

logger = logging.getLogger(__name__)

_SAFE_KEY_RE = re.compile(r"^[A-Za-z0-9_\-]+$")


class CacheStore(Protocol):
    def get(self, key: str) -> Optional[Any]:
        ...

    def set(self, key: str, value: Any) -> None:
        ...


@dataclass
class CacheEntry:
    key: str
    value: Any
    created_at: float


class InMemoryCacheStore:
    """Process-scoped store; also what the tests inject."""

    def __init__(self):
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        return entry.value if entry else None

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(key=key, value=value, created_at=time.time())

    def entry(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def __len__(self) -> int:
        return len(self._entries)


class FileCacheStore:
    """One JSON file per key under cache_dir, replaced atomically on write."""

    def __init__(self, cache_dir: str = CACHE_DIR):
        self.cache_dir = cache_dir

    def _path(self, key: str) -> str:
        if not _SAFE_KEY_RE.match(key):
            raise ValueError(f"unsafe cache key: {key!r}")
        return os.path.join(self.cache_dir, f"{key}.json")

    def get(self, key: str) -> Optional[Any]:
        path = self._path(key)
        try:
            with open(path, "r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning("Failed to read cache entry %s: %s", path, e)
            return None
        if not isinstance(payload, dict):
            return None
        return payload.get("value")

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        entry = {"key": key, "value": value, "created_at": time.time()}
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
            # atomic write
            tmp = path + ".tmp"
            with open(tmp, "w", encoding="utf-8") as fh:
                json.dump(entry, fh, ensure_ascii=False)
            os.replace(tmp, path)
            logger.info("Cached response to %s", path)
        except OSError as e:
            logger.warning("Failed to cache response to %s: %s", path, e)


def get_default_store() -> Optional[CacheStore]:
    if not CACHE_ENABLED:
        return None
    return FileCacheStore(CACHE_DIR)


def _normalize_param(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    if isinstance(value, str):
        return value
    return str(value)


def make_cache_key(params: Dict[str, Any], namespace: str = CACHE_NAMESPACE) -> str:
    """
    Stable key for a flat set of string / string-list parameters.
    Field order does not matter; None values count as absent.
    """
    normalized = {k: _normalize_param(v) for k, v in params.items() if v is not None}
    canonical = json.dumps(normalized, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    digest = hashlib.sha256(f"{namespace}:{canonical}".encode("utf-8")).hexdigest()
    return f"{namespace}-{digest}"


@dataclass(frozen=True)
class CachedRecovery:
    result: RecoveryResult
    cache_hit: bool
    key: str


def _store_get(store: CacheStore, key: str) -> Optional[Any]:
    try:
        return store.get(key)
    except Exception as e:
        logger.warning("Cache store unavailable on read, treating as miss: %s", e)
        return None


def _store_set(store: CacheStore, key: str, value: Any) -> None:
    try:
        store.set(key, value)
    except Exception as e:
        logger.warning("Cache store unavailable on write: %s", e)


async def recover_with_cache(params: Dict[str, Any],
                             call_model: Callable[[], Awaitable[str]],
                             store: Optional[CacheStore],
                             namespace: str = CACHE_NAMESPACE) -> CachedRecovery:
    """
    Look up params in store; on a miss call the model, run the recovery
    pipeline and cache the document only if recovery succeeded.
    Errors raised by call_model propagate to the caller.
    """
    key = make_cache_key(params, namespace)

    if store is not None:
        cached = _store_get(store, key)
        if cached is not None:
            try:
                document = RecoveredDocument.model_validate(cached)
            except ValidationError:
                logger.warning("Ignoring malformed cache entry %s", key)
            else:
                logger.info("Loading response from cache: %s", key)
                return CachedRecovery(
                    result=RecoveryResult(document=document, stage=RecoveryStage.CACHED),
                    cache_hit=True,
                    key=key,
                )

    raw = await call_model()
    result = recover_document(raw)
    if result.ok and store is not None:
        _store_set(store, key, result.document.model_dump())
    elif not result.ok:
        logger.warning("Recovery failed (%s): %s", result.failure.value, result.detail)
    return CachedRecovery(result=result, cache_hit=False, key=key)
