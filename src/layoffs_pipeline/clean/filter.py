"""Removal of rows that carry neither layoff measure."""
from __future__ import annotations

import logging

import pandas as pd

log = logging.getLogger(__name__)


def drop_unmeasured(pdf: pd.DataFrame) -> pd.DataFrame:
    """Drop rows where both `total_laid_off` and `percentage_laid_off` are null."""
    unmeasured = pdf["total_laid_off"].isna() & pdf["percentage_laid_off"].isna()
    out = pdf[~unmeasured]
    log.info("Filter: dropped %d rows with no layoff count or percentage", int(unmeasured.sum()))
    return out
