"""Parsing helpers for the raw layoffs CSV.

`read_layoffs_csv` reads the file as text, `coerce_raw_frame` enforces the
column set and integer columns, and `validate_raw_frame` checks every row
against the `RawLayoff` contract. `load_layoffs_csv` chains all three.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable

import pandas as pd
from pydantic import ValidationError

from layoffs_pipeline.db import plain_records
from layoffs_pipeline.errors import SchemaViolationError
from layoffs_pipeline.models import BUSINESS_FIELDS, INTEGER_FIELDS, RawLayoff

log = logging.getLogger(__name__)

# The public export spells missing values as the literal text NULL.
NULL_MARKERS = ["NULL"]


def read_layoffs_csv(path: Path) -> pd.DataFrame:
    """Read the raw CSV with every column as text.

    Empty strings are kept as-is so blank industries can be told apart from
    missing ones until normalization.
    """
    pdf = pd.read_csv(
        path,
        dtype=str,
        keep_default_na=False,
        na_values=NULL_MARKERS,
    )
    log.info("Read %d raw rows from %s", len(pdf), path)
    return pdf


def _to_nullable_int(series: pd.Series, name: str) -> pd.Series:
    values = series.astype(object).where(series.notna(), None)
    values = values.where(values != "", None)
    numeric = pd.to_numeric(values, errors="coerce")

    bad = values.notna() & numeric.isna()
    if bad.any():
        sample = list(values[bad].unique()[:5])
        raise SchemaViolationError(f"{name}: non-numeric values {sample!r}")

    fractional = numeric.notna() & (numeric % 1 != 0)
    if fractional.any():
        sample = list(numeric[fractional].unique()[:5])
        raise SchemaViolationError(f"{name}: expected whole numbers, got {sample!r}")

    return numeric.astype("Int64")


def coerce_raw_frame(pdf: pd.DataFrame) -> pd.DataFrame:
    """Return a copy restricted to the business fields with integer columns typed.

    Raises:
        SchemaViolationError: if a business field is missing or an integer
            column holds non-numeric or fractional values.
    """
    missing = [c for c in BUSINESS_FIELDS if c not in pdf.columns]
    if missing:
        raise SchemaViolationError(f"Missing required columns: {missing}")

    out = pdf.loc[:, list(BUSINESS_FIELDS)].copy()
    for col in INTEGER_FIELDS:
        out[col] = _to_nullable_int(out[col], col)
    return out


def validate_raw_frame(pdf: pd.DataFrame) -> pd.DataFrame:
    """Validate each row against `RawLayoff`; the first bad row fails the batch.

    Returns:
        The input frame, unchanged.

    Raises:
        SchemaViolationError: naming the offending row index and the errors.
    """
    for idx, rec in zip(pdf.index, plain_records(pdf)):
        try:
            RawLayoff.model_validate(rec)
        except ValidationError as e:
            raise SchemaViolationError(f"Row {idx} violates the raw schema: {e}") from e
    return pdf


def records_to_frame(records: Iterable[dict[str, Any]]) -> pd.DataFrame:
    """Build a checked raw frame from an in-memory sequence of records.

    Raises:
        SchemaViolationError: if any record lacks one of the business fields.
    """
    rows = list(records)
    for i, rec in enumerate(rows):
        missing = [f for f in BUSINESS_FIELDS if f not in rec]
        if missing:
            raise SchemaViolationError(f"Record {i} is missing fields {missing}")

    pdf = pd.DataFrame(rows, columns=list(BUSINESS_FIELDS))
    return validate_raw_frame(coerce_raw_frame(pdf))


def load_layoffs_csv(path: Path) -> pd.DataFrame:
    """Read, coerce and validate the raw layoffs CSV.

    Args:
        path: Path to the CSV export.

    Returns:
        pandas.DataFrame with exactly the business-field columns.
    """
    pdf = validate_raw_frame(coerce_raw_frame(read_layoffs_csv(path)))
    log.info("Loaded %d raw layoff rows", len(pdf))
    return pdf
