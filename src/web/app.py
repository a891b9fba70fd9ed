"""FastAPI service for transcript processing and run history.

Run with:
    uvicorn src.web.app:app --reload --port ${PORT:-8001}

Or via the CLI:
    python main.py serve
"""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, AsyncGenerator, Optional

import aiosqlite
import pydantic
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from src.db.database import get_db
from src.db.repositories import RunRepository
from src.export.json_exporter import export_runs_json
from src.export.naming import all_runs_filename, run_filename
from src.export.writer import MEDIA_TYPES, render_export
from src.extraction.exceptions import InputValidationError, TranscriptEngineError
from src.extraction.processor import TranscriptProcessor
from src.models import ExtractionRequest, Run, RunEvaluation, SettingsConfig, SubmissionForm
from src.orchestration.submission import SubmissionRunner
from src.utils import structured_log
from src.web.auth import require_user
from src.web.dependencies import get_processor, get_repository, get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Optional[SettingsConfig] = getattr(app.state, "settings", None)
    if settings is not None and settings.logging.structured_log_dir:
        structured_log.configure_run_logging(settings.logging.structured_log_dir)
    yield


def create_app(
    settings: Optional[SettingsConfig] = None,
    processor: Optional[TranscriptProcessor] = None,
    session_tokens: Optional[set[str]] = None,
) -> FastAPI:
    """Build the API. Anything not passed in is loaded lazily on first request."""
    app = FastAPI(title="SR&ED Transcript Engine API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.processor = processor
    app.state.session_tokens = session_tokens

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    @app.exception_handler(TranscriptEngineError)
    async def _engine_error_handler(_request: Request, exc: TranscriptEngineError) -> JSONResponse:
        return JSONResponse(status_code=exc.http_status, content=exc.to_payload())

    app.include_router(_build_router())
    return app


def _build_router() -> APIRouter:
    router = APIRouter(prefix="/api")

    @router.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    @router.post("/process-transcript")
    async def process_transcript(
        request: Request,
        _user_id: str = Depends(require_user),
        processor: TranscriptProcessor = Depends(get_processor),
    ) -> dict[str, Any]:
        try:
            body = await request.json()
        except ValueError as exc:
            raise InputValidationError("Request body must be valid JSON") from exc
        if not isinstance(body, dict):
            raise InputValidationError("Request body must be a JSON object")
        try:
            payload = ExtractionRequest.model_validate(body)
        except pydantic.ValidationError as exc:
            raise InputValidationError(f"Invalid request: {exc.errors()[0]['msg']}") from exc
        result = await processor.process(payload)
        return result.to_payload()

    @router.post("/runs")
    async def submit_run(
        form: SubmissionForm,
        user_id: str = Depends(require_user),
        settings: SettingsConfig = Depends(get_settings),
        processor: TranscriptProcessor = Depends(get_processor),
    ) -> dict[str, Any]:
        async with AsyncExitStack() as stack:
            repository: Optional[RunRepository] = None
            try:
                db = await stack.enter_async_context(get_db(settings.storage.db_path))
                repository = RunRepository(db)
            except (OSError, aiosqlite.Error) as exc:
                logger.error("Run store unavailable: %s", exc)
            runner = SubmissionRunner(settings, processor=processor, repository=repository)
            submission = await runner.submit(form, runner.new_session(user_id=user_id))
        return {
            "run": submission.run.model_dump(mode="json"),
            "model_used": submission.model_used,
            "saved": submission.saved,
            "warning": submission.warning,
        }

    @router.get("/runs")
    async def list_runs(
        limit: Optional[int] = None,
        _user_id: str = Depends(require_user),
        repository: RunRepository = Depends(get_repository),
    ) -> list[dict[str, Any]]:
        runs = await repository.list_runs(limit=limit)
        return [_run_summary(run) for run in runs]

    # Registered before /runs/{run_id} so "export" is not taken as an id.
    @router.get("/runs/export")
    async def export_all_runs(
        _user_id: str = Depends(require_user),
        repository: RunRepository = Depends(get_repository),
    ) -> Response:
        runs = await repository.list_runs()
        return _download(export_runs_json(runs), all_runs_filename(), MEDIA_TYPES["json"])

    @router.get("/runs/{run_id}")
    async def get_run(
        run_id: str,
        _user_id: str = Depends(require_user),
        repository: RunRepository = Depends(get_repository),
    ) -> dict[str, Any]:
        return (await _require_run(repository, run_id)).model_dump(mode="json")

    @router.patch("/runs/{run_id}/evaluation")
    async def update_evaluation(
        run_id: str,
        evaluation: RunEvaluation,
        _user_id: str = Depends(require_user),
        repository: RunRepository = Depends(get_repository),
    ) -> dict[str, Any]:
        updated = await repository.update_evaluation(run_id, evaluation)
        if updated is None:
            raise HTTPException(status_code=404, detail="Run not found")
        return updated.model_dump(mode="json")

    @router.get("/runs/{run_id}/export/{fmt}")
    async def export_run(
        run_id: str,
        fmt: str,
        _user_id: str = Depends(require_user),
        repository: RunRepository = Depends(get_repository),
    ) -> Response:
        if fmt not in MEDIA_TYPES:
            raise HTTPException(status_code=400, detail=f"Unsupported export format: {fmt}")
        run = await _require_run(repository, run_id)
        return _download(render_export(run, fmt), run_filename(run, fmt), MEDIA_TYPES[fmt])

    return router


async def _require_run(repository: RunRepository, run_id: str) -> Run:
    run = await repository.get_run(run_id)
    if run is None:
        raise HTTPException(status_code=404, detail="Run not found")
    return run


def _run_summary(run: Run) -> dict[str, Any]:
    return {
        "id": run.id,
        "created_at": run.created_at,
        "client_name": run.client_name,
        "fiscal_year": run.fiscal_year,
        "meeting_type": run.meeting_type,
        "model_used": run.model_used,
        "is_structured": run.is_structured,
        "counts": run.output.bucket_counts(),
    }


def _download(content: str, filename: str, media_type: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


app = create_app()
