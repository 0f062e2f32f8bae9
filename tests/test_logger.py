from __future__ import annotations

from pathlib import Path
from typing import Iterator, List

import pytest
from loguru import logger

from spillscope.utils import (
    LoggingConfig, get_logger, log_execution_time, mission_context, setup_logging
)


@pytest.fixture
def records() -> Iterator[List[dict]]:
    setup_logging(level="DEBUG")
    captured: List[dict] = []
    handler_id = logger.add(lambda message: captured.append(message.record), level="DEBUG")
    yield captured
    logger.remove(handler_id)
    setup_logging()


def test_mission_tags_records_inside_the_block_only(records: List[dict]) -> None:
    log = get_logger("spillscope.raster")

    with mission_context("harbor_pass_07"):
        log.info("inside")
    log.info("outside")

    inside, outside = records
    assert inside["extra"] == {"name": "spillscope.raster", "mission": "harbor_pass_07"}
    assert outside["extra"]["mission"] == "-"


def test_empty_mission_falls_back_to_placeholder(records: List[dict]) -> None:
    with mission_context(""):
        get_logger("x").info("tagged")

    assert records[0]["extra"]["mission"] == "-"


def test_timed_stage_reports_success_and_failure(records: List[dict]) -> None:
    @log_execution_time
    def compose() -> str:
        return "done"

    @log_execution_time
    def explode() -> None:
        raise ValueError("bad polygon")

    assert compose() == "done"
    with pytest.raises(ValueError):
        explode()

    messages = [(r["level"].name, r["message"]) for r in records]
    assert messages[0][0] == "INFO" and messages[0][1].startswith("Stage compose finished in ")
    assert messages[1][0] == "ERROR" and "Stage explode failed" in messages[1][1]
    assert "bad polygon" in messages[1][1]


def test_logging_config_reads_known_keys(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "logging:\n  level: DEBUG\n  log_dir: logs\n  colour: always\n", encoding="utf-8"
    )

    config = LoggingConfig.from_file(config_path)

    assert config.level == "DEBUG"
    assert config.log_dir == "logs"
    assert config.rotation == "10 MB"


@pytest.mark.parametrize("body", ["", "logging: null\n", "- just\n- a list\n", "logging: [1, 2\n", "logging: [1, 2]\n"])
def test_logging_config_falls_back_to_defaults(tmp_path: Path, body: str) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(body, encoding="utf-8")

    assert LoggingConfig.from_file(config_path) == LoggingConfig()
    assert LoggingConfig.from_file(tmp_path / "missing.yaml") == LoggingConfig()


def test_log_dir_receives_mission_and_error_logs(tmp_path: Path) -> None:
    log_dir = tmp_path / "logs"
    config_path = tmp_path / "config.yaml"
    config_path.write_text(f"logging:\n  level: INFO\n  log_dir: {log_dir}\n", encoding="utf-8")

    setup_logging(config_path)
    try:
        with mission_context("delta_survey"):
            get_logger("spillscope.report").info("report written")
            get_logger("spillscope.report").error("report failed")
    finally:
        logger.remove()
        setup_logging()

    main_log = (log_dir / "spillscope.log").read_text(encoding="utf-8")
    error_log = (log_dir / "errors.log").read_text(encoding="utf-8")
    assert "delta_survey | spillscope.report:" in main_log
    assert "report written" in main_log and "report failed" in main_log
    assert "report failed" in error_log
    assert "report written" not in error_log
