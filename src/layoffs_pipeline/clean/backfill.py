"""Same-company industry backfill.

A `company -> industry` lookup is built once from rows that know their
industry; rows with a null industry then take the value for their company.
When siblings disagree, the lexicographically smallest industry wins.
"""
from __future__ import annotations

import logging

import pandas as pd

log = logging.getLogger(__name__)


def industry_lookup(pdf: pd.DataFrame) -> pd.Series:
    """Return a Series mapping company -> chosen known industry."""
    known = pdf.loc[pdf["industry"].notna() & pdf["company"].notna(), ["company", "industry"]]
    return known.groupby("company")["industry"].min()


def backfill_industry(pdf: pd.DataFrame) -> pd.DataFrame:
    """Fill null industries from other rows of the same company.

    The lookup is keyed on the exact (trimmed) company name, so one pass
    already reaches the fixed point. Only values that already exist on a
    same-company row are ever introduced.

    Args:
        pdf: Normalized frame with `company` and `industry` columns.

    Returns:
        A new frame with backfilled industries.
    """
    pdf = pdf.copy()
    lookup = industry_lookup(pdf)

    missing = pdf["industry"].isna()
    fill = pdf.loc[missing, "company"].map(lookup)
    pdf.loc[missing, "industry"] = fill

    log.info(
        "Backfill: %d rows missing industry, %d filled from same-company rows",
        int(missing.sum()),
        int(fill.notna().sum()),
    )
    return pdf
