"""Full submission flow: bounded extraction followed by best-effort persistence."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from src.db.repositories import RunRepository
from src.extraction.exceptions import TranscriptEngineError
from src.extraction.processor import ProcessResult, TranscriptProcessor
from src.models import Run, SettingsConfig, SREDOutput, SubmissionForm
from src.orchestration.context import SubmissionSession
from src.utils import structured_log

logger = logging.getLogger(__name__)

PERSIST_WARNING = "Results processed but failed to save to history."


@dataclass
class SubmissionResult:
    """What the operator sees after a submission.

    ``run`` is always populated; ``saved`` tells whether it reached the store.
    A non-empty ``persist_error`` is a warning, not a failure.
    """

    run: Run
    result: ProcessResult
    elapsed_seconds: float
    saved: bool = False
    persist_error: Optional[str] = None

    @property
    def output(self) -> Optional[SREDOutput]:
        return self.result.output

    @property
    def content(self) -> Optional[str]:
        return self.result.content

    @property
    def model_used(self) -> str:
        return self.result.model_used

    @property
    def warning(self) -> Optional[str]:
        return PERSIST_WARNING if self.persist_error else None


class SubmissionRunner:
    def __init__(
        self,
        settings: SettingsConfig,
        processor: Optional[TranscriptProcessor] = None,
        repository: Optional[RunRepository] = None,
    ):
        self.settings = settings
        self.processor = processor or TranscriptProcessor(settings)
        self.repository = repository

    def new_session(self, user_id: Optional[str] = None, on_tick=None) -> SubmissionSession:
        return SubmissionSession(
            user_id=user_id,
            timeout_seconds=self.settings.submission.timeout_seconds,
            tick_seconds=self.settings.submission.tick_seconds,
            on_tick=on_tick,
        )

    async def submit(self, form: SubmissionForm, session: Optional[SubmissionSession] = None) -> SubmissionResult:
        """Process ``form`` within ``session`` and persist the run once.

        Errors from validation, the model call, parsing, timeout or
        cancellation propagate unchanged and nothing is written.
        """
        session = session or self.new_session()
        submission_id = str(uuid.uuid4())
        structured_log.bind_submission(submission_id, session.user_id)
        try:
            result = await session.run(self.processor.process(form.to_request()))
            elapsed = session.elapsed
            run = Run.from_result(
                transcript=form.transcript,
                context_pack=form.context_pack,
                system_prompt=form.system_prompt,
                model_used=result.model_used,
                metadata=form.metadata,
                output=result.output,
                raw_output=result.content,
                user_id=session.user_id,
            )
            submission = SubmissionResult(run=run, result=result, elapsed_seconds=elapsed)
            await self._persist(submission)
            structured_log.log_submission(
                "success",
                model=result.model_used,
                run_id=run.id if submission.saved else None,
                elapsed_s=elapsed,
                counts=result.output.bucket_counts() if result.output else None,
            )
            return submission
        except TranscriptEngineError as e:
            logger.warning("Submission failed (%s): %s", e.kind.value, e.message)
            structured_log.log_submission(
                "failed", model=form.model, error_kind=e.kind.value, error=e.message, elapsed_s=session.elapsed
            )
            raise
        finally:
            structured_log.unbind_submission()

    async def _persist(self, submission: SubmissionResult) -> None:
        if self.repository is None:
            submission.persist_error = "No run repository configured"
            logger.warning("%s: %s", PERSIST_WARNING, submission.persist_error)
            return
        try:
            await self.repository.save_run(submission.run)
        except Exception as e:
            submission.persist_error = str(e) or type(e).__name__
            logger.error("Failed to save run %s: %s", submission.run.id, submission.persist_error)
            return
        submission.saved = True
        logger.info("Saved run %s", submission.run.id)
