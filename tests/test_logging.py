from __future__ import annotations

import logging
from pathlib import Path

from layoffs_pipeline.logging_config import configure_logging


def test_configure_logging_adds_stream_handler() -> None:
    # Ensure configuring logging doesn't raise and attaches a StreamHandler
    configure_logging(None)
    root = logging.getLogger()
    assert any(isinstance(h, logging.StreamHandler) for h in root.handlers)


def test_configure_logging_writes_to_file(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "pipeline.log"
    configure_logging(log_path)
    logging.getLogger("layoffs_pipeline.test").info("hello from the pipeline")
    for h in logging.getLogger().handlers:
        h.flush()
    assert "hello from the pipeline" in log_path.read_text(encoding="utf-8")
    configure_logging(None)
