from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from ideaforge import __version__
from ideaforge.apps.runtime_support import IdeaForgeRuntime, build_runtime
from ideaforge.cli import base_parser
from ideaforge.core.projects.export import render_csv, render_json, render_markdown, safe_filename
from ideaforge.core.runtime.errors import (
    ErrorCode,
    IdeaForgeError,
    InputValidationError,
    RateLimitExceeded,
    error_payload,
)
from ideaforge.core.telemetry.logging import get_logger
from ideaforge.core.telemetry.tracing import recent_traces


class ContentRequest(BaseModel):
    content: str | None = None
    domain: str = "general"


class SynthesizeRequest(BaseModel):
    concepts: list[str] | None = None
    domain: str = "general"


class ProjectSaveRequest(BaseModel):
    id: str | None = None
    name: str | None = None
    ideaTree: Any = None


def _client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _http_error_code(status: int) -> ErrorCode:
    if status == 404:
        return ErrorCode.NOT_FOUND
    if status == 429:
        return ErrorCode.RATE_LIMITED
    return ErrorCode.INVALID_INPUT if status < 500 else ErrorCode.INTERNAL_ERROR


def _attachment(body: str, media_type: str, name: str, ext: str) -> Response:
    return Response(
        content=body,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{safe_filename(name)}.{ext}"'},
    )


def create_app(config_path: str | None = None, runtime: IdeaForgeRuntime | None = None) -> FastAPI:
    runtime = runtime or build_runtime(config_path=config_path)
    cfg = runtime.cfg
    logger = get_logger("ideaforge.api")

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info("server_starting", version=__version__)
        yield
        await runtime.aclose()

    app = FastAPI(title="IdeaForge API", version=__version__, lifespan=lifespan)
    app.state.runtime = runtime

    @app.exception_handler(IdeaForgeError)
    async def _handle_domain_error(request: Request, exc: IdeaForgeError) -> JSONResponse:
        log = logger.warning if exc.http_status < 500 else logger.error
        log("request_failed", path=request.url.path, code=exc.code.value, kind=exc.kind.value, error=str(exc))
        return JSONResponse(status_code=exc.http_status, content=error_payload(exc, production=cfg.production))

    @app.exception_handler(StarletteHTTPException)
    async def _handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        logger.warning("request_rejected", path=request.url.path, method=request.method, status=exc.status_code)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail), "code": _http_error_code(exc.status_code).value},
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def _handle_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning("request_invalid", path=request.url.path, errors=len(exc.errors()))
        return JSONResponse(status_code=400, content={"error": "Invalid request body", "code": ErrorCode.INVALID_INPUT.value})

    @app.exception_handler(Exception)
    async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_error", path=request.url.path, method=request.method, error=str(exc))
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "code": ErrorCode.INTERNAL_ERROR.value, "requestId": str(uuid.uuid4())},
        )

    def _api_gate(request: Request) -> None:
        if not cfg.rate_limit.enabled:
            return
        if request.method == "GET" and request.url.path.startswith("/api/projects"):
            return
        if not runtime.api_limiter.allow(_client_key(request)):
            raise RateLimitExceeded("api budget exhausted")

    def _ai_gate(request: Request, response: Response) -> None:
        if not cfg.rate_limit.enabled:
            return
        key = _client_key(request)
        if not runtime.ai_limiter.allow(key):
            raise RateLimitExceeded("Too many AI requests, please slow down.")
        response.headers["X-RateLimit-Remaining"] = str(runtime.ai_limiter.remaining(key))

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "version": __version__, "environment": cfg.environment}

    api = APIRouter(prefix="/api", dependencies=[Depends(_api_gate)])
    ai = [Depends(_ai_gate)]

    @api.post("/inspire", dependencies=ai)
    async def inspire(payload: ContentRequest) -> dict:
        result = await runtime.orchestrator.inspire(payload.content, payload.domain)
        return {
            "id": result.id,
            "raw": result.raw,
            "ideas": [{"id": i.id, "text": i.text, "title": i.title} for i in result.ideas],
            "backend": result.backend.value,
        }

    @api.post("/synthesize", dependencies=ai)
    async def synthesize(payload: SynthesizeRequest) -> dict:
        result = await runtime.orchestrator.synthesize(payload.concepts, payload.domain)
        return {"id": result.id, "synthesized": result.text, "backend": result.backend.value}

    @api.post("/critique", dependencies=ai)
    async def critique(payload: ContentRequest) -> dict:
        result = await runtime.orchestrator.critique(payload.content, payload.domain)
        return {"id": result.id, "critique": result.points, "backend": result.backend.value}

    @api.post("/refine-title", dependencies=ai)
    async def refine_title(payload: ContentRequest) -> dict:
        result = await runtime.orchestrator.refine_title(payload.content, payload.domain)
        return {"id": result.id, "title": result.text, "backend": result.backend.value}

    @api.get("/providers")
    def providers() -> dict:
        return runtime.provider_summary()

    @api.get("/routing/recent")
    def routing_recent(
        task_kind: str | None = Query(default=None),
        limit: int = Query(default=20, ge=1, le=500),
    ) -> dict:
        return {"items": recent_traces(task_kind=task_kind, limit=limit)}

    @api.post("/projects")
    def save_project(payload: ProjectSaveRequest) -> dict:
        return runtime.projects.save(payload.id, payload.name, payload.ideaTree)

    @api.get("/projects")
    def list_projects() -> dict:
        return {"projects": runtime.projects.list_projects()}

    @api.get("/projects/{project_id}")
    def get_project(project_id: str) -> dict:
        return runtime.projects.get(project_id)

    @api.delete("/projects/{project_id}")
    def delete_project(project_id: str) -> dict:
        return runtime.projects.delete(project_id)

    @api.get("/export/{project_id}/json")
    def export_json(project_id: str) -> Response:
        project = runtime.projects.get(project_id)
        return _attachment(render_json(project), "application/json", project["name"], "json")

    @api.get("/export/{project_id}/markdown")
    def export_markdown(project_id: str) -> Response:
        project = runtime.projects.get(project_id)
        return _attachment(render_markdown(project["name"], project["ideaTree"]), "text/markdown", project["name"], "md")

    @api.get("/export/{project_id}/csv")
    def export_csv(project_id: str) -> Response:
        project = runtime.projects.get(project_id)
        return _attachment(render_csv(project["ideaTree"]), "text/csv", project["name"], "csv")

    @api.post("/import")
    async def import_project(request: Request) -> dict:
        try:
            data = await request.json()
        except ValueError as exc:
            raise InputValidationError("Invalid JSON file") from exc
        return runtime.projects.import_project(data)

    app.include_router(api)
    return app


def main() -> int:
    parser = base_parser("ideaforge-api", "IdeaForge creative-generation API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=3000)
    args = parser.parse_args()

    api = create_app(config_path=args.config)
    uvicorn.run(api, host=args.host, port=args.port, log_level="info")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
