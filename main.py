#!/usr/bin/env python3
"""
Main Entry Point

SR&ED Transcript Engine - structured extraction from technical interview transcripts
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table

from src.config.defaults import (
    DEFAULT_CONTEXT_PACK,
    DEFAULT_CONTEXT_PACK_NAME,
    DEFAULT_CONTEXT_PACK_VERSION,
    DEFAULT_SYSTEM_PROMPT,
    DEFAULT_SYSTEM_PROMPT_NAME,
    DEFAULT_SYSTEM_PROMPT_VERSION,
)
from src.config.loader import load_settings, validate_secret_env
from src.db.database import get_db
from src.db.repositories import RunRepository
from src.export.interactive import InteractiveView
from src.export.writer import RENDERERS, write_all_runs, write_export
from src.extraction.exceptions import ParseFailureError, TranscriptEngineError
from src.models import Bucket, Run, RunEvaluation, RunMetadata, SettingsConfig, SubmissionForm
from src.orchestration.submission import SubmissionRunner
from src.utils import structured_log
from src.utils.logging_config import LogLevel, setup_logging

console = Console()

# Load environment variables from .env file
load_dotenv()


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="SR&ED Transcript Engine - structured extraction from interview transcripts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=str,
        default=os.getenv("SRED_SETTINGS", "config/settings.yaml"),
        help="Path to settings file (default: config/settings.yaml)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write logs to this file",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    process = sub.add_parser("process", help="Extract SR&ED material from a transcript")
    process.add_argument("transcript", help="Transcript file path, or '-' for stdin")
    process.add_argument("--context-pack", help="Context pack file (default: built-in reasoning guide)")
    process.add_argument("--system-prompt", help="System prompt file (default: built-in analyst prompt)")
    process.add_argument("--model", help="Model key: openai, claude or gemini")
    process.add_argument("--client", dest="client_name", help="Client name")
    process.add_argument("--fiscal-year", help="Fiscal year label")
    process.add_argument("--meeting-type", help="Meeting type label")
    process.add_argument(
        "--unstructured",
        action="store_true",
        help="Return the model's raw text instead of structured JSON",
    )
    process.add_argument("--expand-citations", action="store_true", help="Show all citations expanded")

    history = sub.add_parser("history", help="List saved runs, newest first")
    history.add_argument("--limit", type=int, default=None)

    show = sub.add_parser("show", help="Display a saved run")
    show.add_argument("run_id")
    show.add_argument("--expand-citations", action="store_true")

    evaluate = sub.add_parser("evaluate", help="Score a saved run")
    evaluate.add_argument("run_id")
    evaluate.add_argument("--bucket", choices=[b.value for b in Bucket])
    evaluate.add_argument("--score", type=int, choices=range(1, 6), metavar="1-5")
    evaluate.add_argument("--notes", help="Notes for the chosen bucket")
    evaluate.add_argument("--overall", help="Overall notes for the run")

    export = sub.add_parser("export", help="Export one run")
    export.add_argument("run_id")
    export.add_argument("--format", dest="fmt", choices=sorted(RENDERERS), default="json")
    export.add_argument("--out", help="Output directory (default: storage.export_dir)")

    export_all = sub.add_parser("export-all", help="Export every run as one JSON file")
    export_all.add_argument("--out", help="Output directory (default: storage.export_dir)")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=int(os.getenv("PORT", "8001")))

    return parser.parse_args(argv)


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _build_form(args, settings: SettingsConfig) -> SubmissionForm:
    metadata = RunMetadata(
        client_name=args.client_name,
        fiscal_year=args.fiscal_year,
        meeting_type=args.meeting_type,
    )
    if args.context_pack:
        context_pack = _read_text(args.context_pack)
        metadata.context_pack_name = Path(args.context_pack).stem
    else:
        context_pack = DEFAULT_CONTEXT_PACK
        metadata.context_pack_name = DEFAULT_CONTEXT_PACK_NAME
        metadata.context_pack_version = DEFAULT_CONTEXT_PACK_VERSION
    if args.system_prompt:
        system_prompt = _read_text(args.system_prompt)
        metadata.prompt_name = Path(args.system_prompt).stem
    else:
        system_prompt = DEFAULT_SYSTEM_PROMPT
        metadata.prompt_name = DEFAULT_SYSTEM_PROMPT_NAME
        metadata.prompt_version = DEFAULT_SYSTEM_PROMPT_VERSION
    return SubmissionForm(
        transcript=_read_text(args.transcript),
        context_pack=context_pack,
        model=args.model or settings.default_model,
        system_prompt=system_prompt,
        disable_structured_output=args.unstructured,
        metadata=metadata,
    )


def _show_run(run: Run, expand: bool) -> None:
    if not run.is_structured:
        console.print(Panel(run.raw_output or "", title=f"Raw output ({run.model_used})", border_style="blue"))
        return
    view = InteractiveView(run.output, model_used=run.model_used)
    if expand:
        view.expand_all()
    view.print(console)


async def _cmd_process(args, settings: SettingsConfig) -> int:
    missing = validate_secret_env(settings)
    if missing:
        console.print(f"[red]Missing environment variables: {', '.join(missing)}[/red]")
        return 1
    form = _build_form(args, settings)
    async with get_db(settings.storage.db_path) as db:
        runner = SubmissionRunner(settings, repository=RunRepository(db))
        with console.status("Processing transcript...") as status:
            session = runner.new_session(
                on_tick=lambda elapsed: status.update(f"Processing transcript... {int(elapsed)}s")
            )
            submission = await runner.submit(form, session)

    if submission.warning:
        console.print(f"[yellow]Warning: {submission.warning}[/yellow] ({submission.persist_error})")
    else:
        console.print(f"[green]Run completed.[/green] Saved as {submission.run.id}")
    _show_run(submission.run, args.expand_citations)
    return 0


async def _cmd_history(args, settings: SettingsConfig) -> int:
    async with get_db(settings.storage.db_path) as db:
        runs = await RunRepository(db).list_runs(limit=args.limit)
    if not runs:
        console.print("No runs yet.")
        return 0
    table = Table(title="Run History")
    table.add_column("Date")
    table.add_column("Client")
    table.add_column("FY")
    table.add_column("Model")
    table.add_column("Projects", justify="right")
    table.add_column("Work", justify="right")
    table.add_column("Iterations", justify="right")
    table.add_column("ID", style="dim")
    for run in runs:
        counts = run.output.bucket_counts()
        table.add_row(
            run.created_datetime.strftime("%Y-%m-%d %H:%M"),
            run.client_name or "-",
            run.fiscal_year or "-",
            run.model_used,
            str(counts["candidate_projects"]),
            str(counts["work_performed"]),
            str(counts["iterations"]),
            run.id,
        )
    console.print(table)
    return 0


async def _load_run(settings: SettingsConfig, run_id: str) -> Optional[Run]:
    async with get_db(settings.storage.db_path) as db:
        run = await RunRepository(db).get_run(run_id)
    if run is None:
        console.print(f"[red]Run not found: {run_id}[/red]")
    return run


async def _cmd_show(args, settings: SettingsConfig) -> int:
    run = await _load_run(settings, args.run_id)
    if run is None:
        return 1
    _show_run(run, args.expand_citations)
    return 0


async def _cmd_evaluate(args, settings: SettingsConfig) -> int:
    if args.bucket is None and args.overall is None:
        console.print("[red]Pass --bucket with --score/--notes, or --overall[/red]")
        return 2
    evaluation = RunEvaluation()
    if args.bucket is not None:
        evaluation = RunEvaluation.for_bucket(Bucket(args.bucket), score=args.score, notes=args.notes)
    if args.overall is not None:
        evaluation.eval_notes_overall = args.overall
    async with get_db(settings.storage.db_path) as db:
        updated = await RunRepository(db).update_evaluation(args.run_id, evaluation)
    if updated is None:
        console.print(f"[red]Run not found: {args.run_id}[/red]")
        return 1
    console.print(f"[green]Evaluation saved for {args.run_id}[/green]")
    return 0


async def _cmd_export(args, settings: SettingsConfig) -> int:
    run = await _load_run(settings, args.run_id)
    if run is None:
        return 1
    path = write_export(run, args.fmt, args.out or settings.storage.export_dir)
    console.print(f"Exported to {path}")
    return 0


async def _cmd_export_all(args, settings: SettingsConfig) -> int:
    async with get_db(settings.storage.db_path) as db:
        runs = await RunRepository(db).list_runs()
    path = write_all_runs(runs, args.out or settings.storage.export_dir)
    console.print(f"Exported {len(runs)} runs to {path}")
    return 0


COMMANDS = {
    "process": _cmd_process,
    "history": _cmd_history,
    "show": _cmd_show,
    "evaluate": _cmd_evaluate,
    "export": _cmd_export,
    "export-all": _cmd_export_all,
}


def _serve(args, settings: SettingsConfig) -> int:
    import uvicorn

    from src.web.app import create_app

    app = create_app(settings=settings)
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


def configure_logging(args, settings: SettingsConfig) -> None:
    """Console and file logging from settings; CLI flags take precedence."""
    log_file = args.log_file or settings.logging.log_file
    setup_logging(
        level=LogLevel.DETAILED if args.verbose else LogLevel(settings.logging.level),
        log_to_file=log_file is not None,
        log_file=log_file,
        verbose=args.verbose,
        debug=args.debug,
    )
    if settings.logging.structured_log_dir:
        structured_log.configure_run_logging(settings.logging.structured_log_dir)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        return 1
    configure_logging(args, settings)

    if args.command == "serve":
        return _serve(args, settings)

    if args.command == "process":
        console.print()
        console.print(Rule("[bold cyan]SR&ED Transcript Engine[/bold cyan]", style="cyan"))
        console.print()

    try:
        return asyncio.run(COMMANDS[args.command](args, settings))
    except ParseFailureError as e:
        console.print(f"[red]{e.message}[/red]")
        console.print(Panel(e.raw_content, title="Raw model output", border_style="red"))
        return 1
    except TranscriptEngineError as e:
        console.print(f"[red]{e.message}[/red]")
        return 1
    except KeyboardInterrupt:
        console.print("[yellow]Cancelled.[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
