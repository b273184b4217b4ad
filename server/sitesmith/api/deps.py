# sitesmith/api/deps.py
from typing import Optional

from fastapi import Header, HTTPException

from sitesmith.core.codegen_agent import ModelCall
from sitesmith.core.lifecycle import InMemoryProjectStore, ProjectStore
from sitesmith.core.result_cache import CacheStore, get_default_store

_project_store = InMemoryProjectStore()


def get_cache_store() -> Optional[CacheStore]:
    return get_default_store()


def get_model_call() -> Optional[ModelCall]:
    # None lets the agent use the configured LLM (or templates without credentials)
    return None


def get_project_store() -> ProjectStore:
    return _project_store


def get_actor_id(x_user_id: Optional[str] = Header(None)) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id
