"""Validation utilities for the Clean layer.

This module validates cleaned rows against the Pydantic `LayoffRecord` model,
converting pandas timestamps into native dates prior to validation.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import pandas as pd
from pydantic import ValidationError

from layoffs_pipeline.db import plain_records
from layoffs_pipeline.models import LayoffRecord

log = logging.getLogger(__name__)


def validate_partition(pdf: pd.DataFrame) -> tuple[list[dict[str, Any]], int]:
    """Validate a pandas partition of cleaned records using Pydantic.

    Args:
        pdf: Pandas DataFrame of cleaned records.

    Returns:
        A tuple of (list_of_validated_records, bad_count).
    """
    good: list[dict[str, Any]] = []
    bad = 0

    for rec in plain_records(pdf):
        if isinstance(rec.get("date"), datetime):
            rec["date"] = rec["date"].date()

        try:
            m = LayoffRecord.model_validate(rec)
            good.append(m.model_dump(mode="python"))
        except ValidationError as e:
            log.warning("Invalid clean record for %r: %s", rec.get("company"), e)
            bad += 1

    return good, bad
