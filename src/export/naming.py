"""Export filenames."""

import re
from datetime import date
from typing import Optional

from src.models import Run

_UNSAFE = re.compile(r"[^a-zA-Z0-9]")


def filename_base(run: Run) -> str:
    """``sred-run-<client>-<YYYY-MM-DD>`` with non-alphanumerics replaced by ``-``."""
    client = _UNSAFE.sub("-", run.client_name) if run.client_name else "unknown"
    return f"sred-run-{client}-{run.created_datetime.strftime('%Y-%m-%d')}"


def run_filename(run: Run, extension: str) -> str:
    return f"{filename_base(run)}.{extension}"


def all_runs_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"sred-all-runs-{today.strftime('%Y-%m-%d')}.json"
