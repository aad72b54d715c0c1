"""FastAPI application entrypoint for codeinspector service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..engine import REPORT_VERSION, PipelineEngine
from ..errors import PreconditionError
from ..models import ProjectContext


class AnalyzeRequest(BaseModel):
    path: str
    name: Optional[str] = None
    excluded_folders: List[str] = Field(default_factory=list)
    project_type: str = "auto"
    framework: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    version: str


def _default_engine() -> PipelineEngine:
    return PipelineEngine()


def create_app(
    engine_factory: Callable[[], PipelineEngine] = _default_engine,
) -> FastAPI:
    """Create the FastAPI application exposing the analysis pipeline."""

    app = FastAPI(title="CodeInspector Service", version=REPORT_VERSION)

    async def get_engine() -> PipelineEngine:
        # A fresh engine per request keeps runs independent.
        return engine_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=REPORT_VERSION)

    @app.post("/analyze")
    async def analyze(
        payload: AnalyzeRequest,
        engine: PipelineEngine = Depends(get_engine),
    ) -> Dict[str, Any]:
        project = ProjectContext(
            root_path=payload.path,
            name=payload.name,
            excluded_folders=list(payload.excluded_folders),
            project_type=payload.project_type,
            framework=payload.framework,
        )

        def _run() -> Dict[str, Any]:
            return engine.run(project)

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _run)

    @app.exception_handler(PreconditionError)
    async def precondition_handler(
        _: Any, exc: PreconditionError
    ) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(
        _: Any, exc: ValueError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)


__all__ = ["AnalyzeRequest", "create_app", "run_service"]
