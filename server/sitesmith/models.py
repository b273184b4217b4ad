from pydantic import BaseModel
from typing import Any, Dict, List, Optional, Union


class GenerateCodeRequest(BaseModel):
    projectId: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    projectType: Optional[str] = None
    targetAudience: Optional[str] = None
    valueProposition: Optional[str] = None
    userFlow: Optional[List[Union[str, Dict[str, Any]]]] = None
    aiResponse: Optional[str] = None
    options: Optional[Dict[str, Any]] = {}


class FileEntry(BaseModel):
    content: str
    language: str
    lastModified: Optional[int] = None


class GenerateCodeResponse(BaseModel):
    files: Dict[str, FileEntry]
    source: str
    stage: Optional[str] = None
    warnings: List[str] = []
    failure: Optional[str] = None


class GenerateFileRequest(BaseModel):
    fileName: Optional[str] = None
    language: Optional[str] = None
    projectName: Optional[str] = None
    projectDescription: Optional[str] = None
    projectType: Optional[str] = None
    existingFiles: List[str] = []
    options: Optional[Dict[str, Any]] = {}


class GenerateFileResponse(BaseModel):
    content: str
    source: str


class ProjectCreateRequest(BaseModel):
    plan: Dict[str, Any] = {}


class CompetitorsRequest(BaseModel):
    competitors: List[Dict[str, Any]]


class BuildRequest(BaseModel):
    # anything left out is taken from the project's plan
    name: Optional[str] = None
    description: Optional[str] = None
    projectType: Optional[str] = None
    targetAudience: Optional[str] = None
    valueProposition: Optional[str] = None
    userFlow: Optional[List[Union[str, Dict[str, Any]]]] = None
    aiResponse: Optional[str] = None
    options: Optional[Dict[str, Any]] = {}


class FileCreateRequest(BaseModel):
    content: str = ""
    language: Optional[str] = None


class FileRenameRequest(BaseModel):
    oldPath: str
    newPath: str


class CompetitorSearchRequest(BaseModel):
    projectName: Optional[str] = None
    projectDescription: Optional[str] = None
    businessType: Optional[str] = None
    options: Optional[Dict[str, Any]] = {}


class CompetitorSearchResponse(BaseModel):
    competitors: List[Dict[str, Any]]
