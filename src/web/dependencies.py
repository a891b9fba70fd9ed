"""Request-scoped dependencies backed by ``app.state``.

Settings, the processor and accepted tokens are created on first use so that
tests can pre-populate ``app.state`` with fakes.
"""

from __future__ import annotations

from typing import AsyncIterator

from fastapi import Request

from src.config.loader import load_settings
from src.db.database import get_db
from src.db.repositories import RunRepository
from src.extraction.processor import TranscriptProcessor
from src.models import SettingsConfig


def get_settings(request: Request) -> SettingsConfig:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        settings = load_settings()
        request.app.state.settings = settings
    return settings


def get_processor(request: Request) -> TranscriptProcessor:
    processor = getattr(request.app.state, "processor", None)
    if processor is None:
        processor = TranscriptProcessor(get_settings(request))
        request.app.state.processor = processor
    return processor


async def get_repository(request: Request) -> AsyncIterator[RunRepository]:
    settings = get_settings(request)
    async with get_db(settings.storage.db_path) as db:
        yield RunRepository(db)
