# sitesmith/api/projects.py
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException

from sitesmith.api.deps import get_actor_id, get_cache_store, get_model_call, get_project_store
from sitesmith.core.codegen_agent import ModelCall, generate_code
from sitesmith.core.competitor_agent import search_competitors
from sitesmith.core.file_tree import (
    AlreadyExistsError,
    FileTreeError,
    InvalidNameError,
    NotFoundError,
    build_tree,
    create_file,
    delete_path,
    rename_path,
    select_file,
    tree_to_dict,
)
from sitesmith.core.lifecycle import (
    InvalidTransitionError,
    LifecycleError,
    NotOwnerError,
    ProjectNotFoundError,
    ProjectStore,
    create_project,
    load_project,
    record_competitors,
    record_files,
    update_files,
)
from sitesmith.core.llm_client import LLMGenerationError
from sitesmith.core.result_cache import CacheStore
from sitesmith.models import (
    BuildRequest,
    CompetitorSearchRequest,
    CompetitorsRequest,
    FileCreateRequest,
    FileRenameRequest,
    ProjectCreateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_http(e: Exception) -> HTTPException:
    if isinstance(e, (ProjectNotFoundError, NotFoundError)):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, NotOwnerError):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, (InvalidTransitionError, AlreadyExistsError)):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, (InvalidNameError, ValueError)):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, LLMGenerationError):
        return HTTPException(status_code=502, detail=str(e))
    logger.error("Unmapped domain error: %r", e)
    return HTTPException(status_code=500, detail="Server error")


@router.post("", status_code=201)
async def create_project_record(req: ProjectCreateRequest,
                                actor_id: str = Depends(get_actor_id),
                                store: ProjectStore = Depends(get_project_store)):
    record = await create_project(store, actor_id, req.plan)
    logger.info("Created project", extra={"project_id": record.id})
    return record.model_dump()


@router.get("/{project_id}")
async def get_project(project_id: str, store: ProjectStore = Depends(get_project_store)):
    try:
        record = await load_project(store, project_id)
    except LifecycleError as e:
        raise _to_http(e)
    return record.model_dump()


@router.put("/{project_id}/competitors")
async def put_competitors(project_id: str,
                          req: CompetitorsRequest,
                          actor_id: str = Depends(get_actor_id),
                          store: ProjectStore = Depends(get_project_store)):
    try:
        record = await load_project(store, project_id)
        record = record_competitors(record, req.competitors, actor_id)
    except LifecycleError as e:
        raise _to_http(e)
    await store.save(record)
    return record.model_dump()


@router.post("/{project_id}/competitors/search")
async def search_project_competitors(project_id: str,
                                     req: CompetitorSearchRequest,
                                     actor_id: str = Depends(get_actor_id),
                                     store: ProjectStore = Depends(get_project_store),
                                     call_model: Optional[ModelCall] = Depends(get_model_call)):
    """Search competitors for the project's plan and record them (-> planning_complete)."""
    try:
        record = await load_project(store, project_id)
        if actor_id != record.owner_id:
            raise NotOwnerError(f"Only the owner of project {record.id} can change it")
        payload: Dict[str, Any] = {
            "projectName": record.plan.get("name"),
            "projectDescription": record.plan.get("description"),
            "businessType": record.plan.get("businessType") or record.plan.get("projectType"),
        }
        payload.update({k: v for k, v in req.model_dump().items() if v})
        found = await search_competitors(payload, call_model=call_model)
        record = record_competitors(record, found["competitors"], actor_id)
    except (LifecycleError, ValueError, LLMGenerationError) as e:
        raise _to_http(e)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error searching competitors", extra={"project_id": project_id})
        raise HTTPException(status_code=500, detail="Server error")

    await store.save(record)
    return {"project": record.model_dump(), "competitors": found["competitors"]}


@router.post("/{project_id}/build")
async def build_project(project_id: str,
                        req: BuildRequest,
                        actor_id: str = Depends(get_actor_id),
                        store: ProjectStore = Depends(get_project_store),
                        cache_store: Optional[CacheStore] = Depends(get_cache_store),
                        call_model: Optional[ModelCall] = Depends(get_model_call)):
    """Generate files (or fall back to templates) and move the project to built."""
    try:
        record = await load_project(store, project_id)
        if actor_id != record.owner_id:
            raise NotOwnerError(f"Only the owner of project {record.id} can change it")
        payload: Dict[str, Any] = dict(record.plan)
        payload.update({k: v for k, v in req.model_dump().items() if v is not None})
        payload["projectId"] = record.id
        generation = await generate_code(payload, store=cache_store, call_model=call_model)
        record = record_files(record, generation["files"], actor_id)
    except (LifecycleError, ValueError) as e:
        raise _to_http(e)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error building project", extra={"project_id": project_id})
        raise HTTPException(status_code=500, detail="Server error")

    await store.save(record)
    return {
        "project": record.model_dump(),
        "source": generation["source"],
        "warnings": generation["warnings"],
        "failure": generation["failure"],
    }


@router.get("/{project_id}/tree")
async def get_tree(project_id: str, store: ProjectStore = Depends(get_project_store)):
    try:
        record = await load_project(store, project_id)
        return tree_to_dict(build_tree(record.files or {}))
    except (LifecycleError, FileTreeError) as e:
        raise _to_http(e)


@router.patch("/{project_id}/files")
async def rename_file(project_id: str,
                      req: FileRenameRequest,
                      actor_id: str = Depends(get_actor_id),
                      store: ProjectStore = Depends(get_project_store)):
    try:
        record = await load_project(store, project_id)
        files = rename_path(record.files or {}, req.oldPath, req.newPath)
        record = update_files(record, files, actor_id)
    except (LifecycleError, FileTreeError) as e:
        raise _to_http(e)
    await store.save(record)
    return {"path": req.newPath, "files": sorted(record.files)}


@router.get("/{project_id}/files/{file_path:path}")
async def get_file(project_id: str, file_path: str, store: ProjectStore = Depends(get_project_store)):
    try:
        record = await load_project(store, project_id)
        leaf = select_file(record.files or {}, file_path)
    except (LifecycleError, FileTreeError) as e:
        raise _to_http(e)
    return {
        "path": leaf.path,
        "content": leaf.content,
        "language": leaf.language,
        "lastModified": leaf.last_modified,
    }


@router.post("/{project_id}/files/{file_path:path}", status_code=201)
async def post_file(project_id: str,
                    file_path: str,
                    req: FileCreateRequest,
                    actor_id: str = Depends(get_actor_id),
                    store: ProjectStore = Depends(get_project_store)):
    try:
        record = await load_project(store, project_id)
        files = create_file(record.files or {}, file_path, req.content, req.language)
        record = update_files(record, files, actor_id)
    except (LifecycleError, FileTreeError) as e:
        raise _to_http(e)
    await store.save(record)
    return {"path": file_path, **record.files[file_path]}


@router.delete("/{project_id}/files/{file_path:path}")
async def remove_file(project_id: str,
                      file_path: str,
                      actor_id: str = Depends(get_actor_id),
                      store: ProjectStore = Depends(get_project_store)):
    try:
        record = await load_project(store, project_id)
        files = delete_path(record.files or {}, file_path)
        record = update_files(record, files, actor_id)
    except (LifecycleError, FileTreeError) as e:
        raise _to_http(e)
    await store.save(record)
    return {"deleted": file_path, "files": sorted(record.files)}
