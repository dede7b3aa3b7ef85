"""Cleaning and normalization utilities.

The normalizer is applied partition-wise using Dask. Every operation is
row-local, so the output is the same for any partition count, and applying
it twice gives the same result as applying it once.
"""
from __future__ import annotations

import logging
from typing import Any

import dask.dataframe as dd
import pandas as pd

from layoffs_pipeline.errors import MalformedDateError, SchemaViolationError

log = logging.getLogger(__name__)

DATE_FORMAT = "%m/%d/%Y"
CRYPTO_PATTERN = r"(?i)crypto"
UNITED_STATES_PATTERN = r"(?i)united states"


def _as_text(series: pd.Series) -> pd.Series:
    """Return an object-dtype copy with None for every missing value."""
    return series.astype(object).where(series.notna(), None)


def _parse_dates(series: pd.Series, date_errors: str) -> pd.Series:
    if pd.api.types.is_datetime64_any_dtype(series):
        return series

    raw = _as_text(series)
    raw = raw.where(raw != "", None)
    parsed = pd.to_datetime(raw, format=DATE_FORMAT, errors="coerce")

    bad = raw.notna() & parsed.isna()
    if bad.any():
        sample = list(raw[bad].unique()[:5])
        if date_errors == "raise":
            raise MalformedDateError(sample)
        log.warning("Nulled %d unparseable dates, e.g. %r", int(bad.sum()), sample)
    return parsed


def _parse_fractions(series: pd.Series) -> pd.Series:
    raw = _as_text(series)
    raw = raw.where(raw != "", None)
    numeric = pd.to_numeric(raw, errors="coerce")

    bad = raw.notna() & numeric.isna()
    if bad.any():
        sample = list(raw[bad].unique()[:5])
        raise SchemaViolationError(f"percentage_laid_off: non-numeric values {sample!r}")

    out_of_range = numeric.notna() & ((numeric < 0) | (numeric > 1))
    if out_of_range.any():
        sample = list(raw[out_of_range].unique()[:5])
        raise SchemaViolationError(f"percentage_laid_off: values outside [0, 1] {sample!r}")
    return numeric.astype("float64")


def normalize_partition(pdf: pd.DataFrame, date_errors: str = "raise") -> pd.DataFrame:
    """Partition-level normalization applied via map_partitions.

    Args:
        pdf: Pandas DataFrame for the partition.
        date_errors: "raise" to fail on unparseable dates, "coerce" to null them.

    Returns:
        Normalized Pandas DataFrame.
    """
    pdf = pdf.copy()

    # -----------------------------
    # Trim company name
    # -----------------------------
    pdf["company"] = _as_text(pdf["company"]).str.strip()

    # -----------------------------
    # Canonical industry / country
    # -----------------------------
    industry = _as_text(pdf["industry"])
    industry = industry.mask(industry.str.match(CRYPTO_PATTERN, na=False), "Crypto")
    pdf["industry"] = industry.where(industry != "", None)

    country = _as_text(pdf["country"])
    pdf["country"] = country.mask(
        country.str.match(UNITED_STATES_PATTERN, na=False), "United States"
    )

    # -----------------------------
    # Typed date and percentage
    # -----------------------------
    pdf["date"] = _parse_dates(pdf["date"], date_errors)
    pdf["percentage_laid_off"] = _parse_fractions(pdf["percentage_laid_off"])

    return pdf


def normalize_records(
    pdf: pd.DataFrame,
    npartitions: int = 1,
    date_errors: str = "raise",
) -> pd.DataFrame:
    """Normalize the staging set through Dask and return it as pandas.

    Row order and index are preserved.

    Raises:
        MalformedDateError: if `date_errors="raise"` and a date is unparseable.
        SchemaViolationError: if a percentage is not numeric.
    """
    log.info("Normalizing %d rows across %d partition(s)", len(pdf), npartitions)

    meta: Any = normalize_partition(pdf.iloc[:0], date_errors)
    ddf = dd.from_pandas(pdf, npartitions=max(1, npartitions), sort=False)
    out = ddf.map_partitions(normalize_partition, date_errors, meta=meta).compute()
    return out.loc[pdf.index]
