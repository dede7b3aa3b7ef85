"""End-to-end cleaning of the raw layoffs frame.

Stages run strictly in order: stage → dedupe → normalize → backfill →
filter. Each stage receives the frame returned by the previous one.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

import pandas as pd

from layoffs_pipeline.clean.backfill import backfill_industry
from layoffs_pipeline.clean.dedupe import DUP_RANK, deduplicate, stage_records
from layoffs_pipeline.clean.filter import drop_unmeasured
from layoffs_pipeline.clean.transform import normalize_records
from layoffs_pipeline.ingest.load_csv import coerce_raw_frame

log = logging.getLogger(__name__)


@dataclass
class CleaningResult:
    """Cleaned frame plus the row count after each stage.

    Attributes:
        cleaned: The cleaned dataset with the business-field columns only.
        stage_counts: Ordered mapping of stage name -> rows after that stage.
    """
    cleaned: pd.DataFrame
    stage_counts: dict[str, int] = field(default_factory=dict)


def run_cleaning(
    raw: pd.DataFrame,
    npartitions: int = 1,
    date_errors: str = "raise",
) -> CleaningResult:
    """Clean a raw layoffs frame.

    Normalization can turn previously distinct rows into exact duplicates
    (e.g. " Acme" and "Acme"), so a final stage+dedupe pass runs on the
    filtered set to keep the output unique across business fields.

    Args:
        raw: Raw frame with the business-field columns.
        npartitions: Dask partitions used by the normalizer.
        date_errors: "raise" or "coerce"; see `normalize_partition`.

    Returns:
        CleaningResult with the cleaned frame (fresh RangeIndex).

    Raises:
        SchemaViolationError: on missing columns or malformed values.
        MalformedDateError: on unparseable dates when `date_errors="raise"`.
    """
    counts: dict[str, int] = {}

    frame = coerce_raw_frame(raw)
    counts["loaded"] = len(frame)

    frame = deduplicate(stage_records(frame))
    counts["deduplicated"] = len(frame)

    frame = normalize_records(frame, npartitions=npartitions, date_errors=date_errors)
    frame = backfill_industry(frame)

    frame = drop_unmeasured(frame)
    counts["filtered"] = len(frame)

    frame = deduplicate(stage_records(frame))
    counts["cleaned"] = len(frame)

    cleaned = frame.drop(columns=[DUP_RANK]).reset_index(drop=True)
    log.info("Cleaning complete: %s", counts)
    return CleaningResult(cleaned=cleaned, stage_counts=counts)
