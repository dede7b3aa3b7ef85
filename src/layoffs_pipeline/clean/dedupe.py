"""Staging and exact-duplicate removal.

`stage_records` tags each row with `dup_rank`, its 1-based position among
rows that agree on every business field. `deduplicate` keeps rank 1 only.
"""
from __future__ import annotations

import logging

import pandas as pd

from layoffs_pipeline.models import BUSINESS_FIELDS

log = logging.getLogger(__name__)

DUP_RANK = "dup_rank"


def stage_records(pdf: pd.DataFrame) -> pd.DataFrame:
    """Return the staging copy of `pdf` with a `dup_rank` column.

    Nulls compare equal to nulls when grouping, so two rows that are both
    missing `industry` still count as duplicates. Ranks follow insertion order.

    Args:
        pdf: Frame holding at least the business-field columns.

    Returns:
        A new frame with a fresh RangeIndex and an integer `dup_rank` column.
    """
    staged = pdf.reset_index(drop=True).copy()
    staged[DUP_RANK] = (
        staged.groupby(list(BUSINESS_FIELDS), dropna=False, sort=False).cumcount() + 1
    )
    return staged


def deduplicate(staged: pd.DataFrame) -> pd.DataFrame:
    """Drop every staged row whose `dup_rank` is greater than 1."""
    out = staged[staged[DUP_RANK] == 1]
    log.info("Deduplicate: %d -> %d rows", len(staged), len(out))
    return out
