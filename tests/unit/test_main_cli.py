from __future__ import annotations

import logging

import pytest
import yaml

import main
from src.utils.logging_config import LOGGER_NAMESPACE


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "storage": {"db_path": str(tmp_path / "runs.db"), "export_dir": str(tmp_path / "exports")},
                "logging": {"structured_log_dir": None},
            }
        ),
        encoding="utf-8",
    )
    return str(path)


def test_subcommand_required() -> None:
    with pytest.raises(SystemExit):
        main.parse_args([])


def test_process_arguments() -> None:
    args = main.parse_args(["process", "t.txt", "--model", "claude", "--client", "Acme", "--unstructured"])
    assert args.command == "process"
    assert args.model == "claude"
    assert args.client_name == "Acme"
    assert args.unstructured is True


def test_evaluate_score_range() -> None:
    with pytest.raises(SystemExit):
        main.parse_args(["evaluate", "abc", "--bucket", "iterations", "--score", "7"])


def test_history_empty(settings_file, capsys) -> None:
    assert main.main(["--config", settings_file, "history"]) == 0
    assert "No runs yet." in capsys.readouterr().out


def test_show_unknown_run(settings_file) -> None:
    assert main.main(["--config", settings_file, "show", "missing"]) == 1


def test_evaluate_needs_a_target(settings_file) -> None:
    assert main.main(["--config", settings_file, "evaluate", "abc"]) == 2


def test_missing_config_file(tmp_path) -> None:
    assert main.main(["--config", str(tmp_path / "nope.yaml"), "history"]) == 1


def test_logging_follows_settings(tmp_path) -> None:
    log_file = tmp_path / "engine.log"
    path = tmp_path / "settings.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "storage": {"db_path": str(tmp_path / "runs.db")},
                "logging": {"level": "minimal", "log_file": str(log_file), "structured_log_dir": None},
            }
        ),
        encoding="utf-8",
    )
    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    try:
        assert main.main(["--config", str(path), "history"]) == 0
        assert package_logger.level == logging.WARNING
        assert any(isinstance(h, logging.FileHandler) for h in package_logger.handlers)
        assert log_file.exists()
    finally:
        for handler in list(package_logger.handlers):
            handler.close()
        package_logger.handlers.clear()


def test_verbose_flag_overrides_settings(settings_file) -> None:
    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    try:
        assert main.main(["--config", settings_file, "-v", "history"]) == 0
        assert package_logger.level == logging.DEBUG
    finally:
        package_logger.handlers.clear()
