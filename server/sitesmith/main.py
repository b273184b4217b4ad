from fastapi import FastAPI

from sitesmith.api.generate import router as generate_router
from sitesmith.api.projects import router as projects_router
from sitesmith.utils.logging_config import configure_logging

configure_logging()

app = FastAPI(title="Sitesmith AI Backend")
app.include_router(generate_router, prefix="/generate")
app.include_router(projects_router, prefix="/projects")
