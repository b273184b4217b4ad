# sitesmith/api/generate.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from sitesmith.api.deps import get_cache_store, get_model_call
from sitesmith.core.codegen_agent import ModelCall, generate_code, generate_file_content
from sitesmith.core.competitor_agent import search_competitors
from sitesmith.core.result_cache import CacheStore
from sitesmith.models import (
    CompetitorSearchRequest,
    CompetitorSearchResponse,
    GenerateCodeRequest,
    GenerateCodeResponse,
    GenerateFileRequest,
    GenerateFileResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/code", response_model=GenerateCodeResponse)
async def generate_code_files(req: GenerateCodeRequest,
                              store: Optional[CacheStore] = Depends(get_cache_store),
                              call_model: Optional[ModelCall] = Depends(get_model_call)):
    """
    Generate the initial file set for a project.
    Unrecoverable model output falls back to template files (source == "template")
    with the failure kind reported; it is still a 200.
    """
    try:
        return await generate_code(req.model_dump(), store=store, call_model=call_model)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error in generate-code endpoint")
        raise HTTPException(status_code=500, detail="Server error")


@router.post("/file", response_model=GenerateFileResponse)
async def generate_single_file(req: GenerateFileRequest,
                               call_model: Optional[ModelCall] = Depends(get_model_call)):
    try:
        return await generate_file_content(req.model_dump(), call_model=call_model)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error in generate-file endpoint")
        raise HTTPException(status_code=500, detail="Failed to generate code content")


@router.post("/competitors", response_model=CompetitorSearchResponse)
async def search_competitor_list(req: CompetitorSearchRequest,
                                 call_model: Optional[ModelCall] = Depends(get_model_call)):
    try:
        return await search_competitors(req.model_dump(), call_model=call_model)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error in search-competitors endpoint")
        raise HTTPException(status_code=500, detail="Failed to search competitors")
