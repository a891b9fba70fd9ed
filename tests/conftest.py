"""
Pytest configuration and fixtures.
"""

import pytest

from src.extraction.processor import TranscriptProcessor
from src.llm.provider import LLMProvider
from src.models import SettingsConfig, SREDOutput
from src.utils import structured_log
from tests.fixtures.fake_llm import FakeBackend
from tests.fixtures.sample_outputs import CACHING_REPLY, make_run, reply_text


@pytest.fixture
def settings(tmp_path) -> SettingsConfig:
    """Default settings with storage redirected into the test's tmp dir."""
    return SettingsConfig.model_validate(
        {
            "storage": {
                "db_path": str(tmp_path / "runs.db"),
                "export_dir": str(tmp_path / "exports"),
            },
            "logging": {"structured_log_dir": None},
        }
    )


@pytest.fixture
def caching_output() -> SREDOutput:
    return SREDOutput.model_validate(CACHING_REPLY)


@pytest.fixture
def sample_run(caching_output):
    return make_run(caching_output, created_at="2024-03-05T14:07:00+00:00")


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend(reply_text(CACHING_REPLY))


@pytest.fixture
def processor(settings, fake_backend) -> TranscriptProcessor:
    return TranscriptProcessor(settings, provider=LLMProvider(settings, backend=fake_backend))


@pytest.fixture(autouse=True)
def _reset_structured_log():
    yield
    structured_log.reset_run_logging()
