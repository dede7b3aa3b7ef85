"""Gold aggregation functions.

Functions in this module build Gold-layer tables from the cleaned layoffs.
Groupings run in Dask; the grouped results are small, so they are computed,
ordered and returned as pandas DataFrames.

Expectations:
- Input: a Dask DataFrame of cleaned records with the business-field columns
  (`company`, `industry`, `total_laid_off`, `percentage_laid_off`, `date`,
  `stage`, `country`, `funds_raised_millions`, ...)
- Nulls are skipped by sums, averages and distinct counts; a group whose
  values are all null sums to null. Null grouping keys form their own group.
- Descending orders put nulls last; ties are broken by the grouping key.
"""
from __future__ import annotations

from typing import Any

from dask import compute  # type: ignore[attr-defined]
import pandas as pd


# =========================================================
# HELPERS
# =========================================================

def _order(
    pdf: pd.DataFrame,
    by: list[str],
    ascending: list[bool],
) -> pd.DataFrame:
    """Stable sort with nulls last, returning a fresh RangeIndex."""
    return pdf.sort_values(
        by, ascending=ascending, na_position="last", kind="mergesort"
    ).reset_index(drop=True)


def _sum_by(ddf: Any, keys: str | list[str], value: str = "total_laid_off") -> Any:
    """Lazy null-skipping sum of `value` per group (all-null group -> null)."""
    return ddf.groupby(keys, dropna=False)[value].sum(min_count=1)


def _companies_by(ddf: Any, key: str) -> pd.DataFrame:
    """Count distinct non-null companies per group, null key included.

    Dask's grouped `nunique` drops the null-key group even with
    `dropna=False`, so the count runs in pandas on the two projected columns.

    Returns:
        DataFrame with columns `key`, `company_count` (int64).
    """
    pdf = ddf[[key, "company"]].compute()
    counts = pdf.groupby(key, dropna=False)["company"].nunique()
    out = counts.rename("company_count").reset_index()
    return out.astype({"company_count": "int64"})


def _mean_by(ddf: Any, key: str, value: str = "percentage_laid_off") -> Any:
    return ddf.groupby(key, dropna=False)[value].mean()


def _with_companies(values: pd.Series, name: str, companies: pd.DataFrame, key: str) -> pd.DataFrame:
    """Join a computed grouped Series with its per-group company counts.

    The merge matches null keys to each other, so the null group keeps its count.
    """
    pdf = values.rename(name).reset_index()
    return pdf.merge(companies, on=key, how="left")


def _same_value(a: Any, b: Any) -> bool:
    if pd.isna(a) or pd.isna(b):
        return bool(pd.isna(a) and pd.isna(b))
    return bool(a == b)


def _dated(ddf: Any) -> Any:
    """Rows with a date, plus `year` and `month` columns."""
    x = ddf[ddf["date"].notnull()]
    return x.assign(year=x["date"].dt.year, month=x["date"].dt.month)


def _full_layoffs(ddf: Any) -> pd.DataFrame:
    return ddf[ddf["percentage_laid_off"] == 1.0].compute()


# =========================================================
# OVERVIEW
# =========================================================

def gold_max_metrics(ddf: Any) -> pd.DataFrame:
    """Return the largest layoff count and the largest layoff fraction.

    Returns:
        One-row DataFrame with `max_total_laid_off`, `max_percentage_laid_off`.
    """
    max_total, max_pct = compute(
        ddf["total_laid_off"].max(),
        ddf["percentage_laid_off"].max(),
    )
    return pd.DataFrame(
        [{"max_total_laid_off": max_total, "max_percentage_laid_off": max_pct}]
    )


def gold_date_range(ddf: Any) -> pd.DataFrame:
    """Return the earliest and latest non-null layoff dates.

    Returns:
        One-row DataFrame with `min_date`, `max_date`.
    """
    min_date, max_date = compute(ddf["date"].min(), ddf["date"].max())
    return pd.DataFrame([{"min_date": min_date, "max_date": max_date}])


def gold_yearly_totals(ddf: Any) -> pd.DataFrame:
    """Return total layoffs per year, newest year first.

    Rows without a date form a trailing null-year group.

    Returns:
        DataFrame with columns: `year`, `total_laid_off`.
    """
    x = ddf.assign(year=ddf["date"].dt.year)
    pdf = _sum_by(x, "year").compute().reset_index()
    pdf["year"] = pdf["year"].astype("Int64")
    return _order(pdf, ["year"], [False])


def gold_stage_totals(ddf: Any) -> pd.DataFrame:
    """Return total layoffs per funding stage, largest first.

    Returns:
        DataFrame with columns: `stage`, `total_laid_off`.
    """
    pdf = _sum_by(ddf, "stage").compute().reset_index()
    return _order(pdf, ["total_laid_off", "stage"], [False, True])


# =========================================================
# 100% LAYOFFS
# =========================================================

def gold_full_layoffs_by_funds(ddf: Any) -> pd.DataFrame:
    """Return every record where the whole workforce was laid off.

    Ordered by `funds_raised_millions` descending.
    """
    pdf = _full_layoffs(ddf)
    return _order(pdf, ["funds_raised_millions", "company"], [False, True])


def gold_full_layoffs_by_count(ddf: Any) -> pd.DataFrame:
    """Return every record where the whole workforce was laid off.

    Ordered by `total_laid_off` descending.
    """
    pdf = _full_layoffs(ddf)
    return _order(pdf, ["total_laid_off", "company"], [False, True])


def gold_top_industries_by_full_layoffs(ddf: Any) -> pd.DataFrame:
    """Return, per industry, how many distinct companies laid off 100%.

    Returns:
        DataFrame with columns: `industry`, `company_count`.
    """
    full = ddf[ddf["percentage_laid_off"] == 1.0]
    pdf = _companies_by(full, "industry")
    return _order(pdf, ["company_count", "industry"], [False, True])


# =========================================================
# COMPANY / INDUSTRY / COUNTRY TOTALS
# =========================================================

def gold_top_companies_by_total(ddf: Any) -> pd.DataFrame:
    """Return total layoffs per company, largest first.

    Returns:
        DataFrame with columns: `company`, `total_laid_off`.
    """
    pdf = _sum_by(ddf, "company").compute().reset_index()
    return _order(pdf, ["total_laid_off", "company"], [False, True])


def gold_industry_totals(ddf: Any) -> pd.DataFrame:
    """Return total layoffs and distinct company count per industry.

    Returns:
        DataFrame with columns: `industry`, `total_laid_off`, `company_count`,
        ordered by `total_laid_off` descending.
    """
    sums = _sum_by(ddf, "industry").compute()
    pdf = _with_companies(sums, "total_laid_off", _companies_by(ddf, "industry"), "industry")
    return _order(pdf, ["total_laid_off", "industry"], [False, True])


def gold_industry_avg_percentage(ddf: Any) -> pd.DataFrame:
    """Return the average layoff fraction per industry, rounded to 2 places.

    Returns:
        DataFrame with columns: `industry`, `avg_percentage`.
    """
    pdf = _mean_by(ddf, "industry").compute().round(2).reset_index()
    pdf = pdf.rename(columns={"percentage_laid_off": "avg_percentage"})
    return _order(pdf, ["avg_percentage", "industry"], [False, True])


def gold_country_totals(ddf: Any) -> pd.DataFrame:
    """Return total layoffs and distinct company count per country.

    Returns:
        DataFrame with columns: `country`, `total_laid_off`, `company_count`,
        ordered by `total_laid_off` descending.
    """
    sums = _sum_by(ddf, "country").compute()
    pdf = _with_companies(sums, "total_laid_off", _companies_by(ddf, "country"), "country")
    return _order(pdf, ["total_laid_off", "country"], [False, True])


def gold_country_avg_percentage(ddf: Any) -> pd.DataFrame:
    """Return average layoff fraction and distinct company count per country.

    Returns:
        DataFrame with columns: `country`, `avg_percentage`, `company_count`,
        ordered by `company_count` descending.
    """
    means = _mean_by(ddf, "country").compute().round(2)
    pdf = _with_companies(means, "avg_percentage", _companies_by(ddf, "country"), "country")
    return _order(pdf, ["company_count", "country"], [False, True])


# =========================================================
# RANKINGS + ROLLING TOTALS
# =========================================================

def gold_top_companies_per_year(ddf: Any, limit: int = 5) -> pd.DataFrame:
    """Dense-rank companies by yearly layoffs and keep the top `limit` ranks.

    Companies tied on their yearly total share a rank, and the next distinct
    total takes the next integer. Rows without a date are excluded.

    Args:
        ddf: Dask DataFrame of cleaned records.
        limit: Highest rank to keep (default 5).

    Returns:
        DataFrame with columns `company`, `year`, `total_laid_off`, `ranking`,
        ordered by year, ranking, company.
    """
    pdf = _sum_by(_dated(ddf), ["year", "company"]).compute().reset_index()
    pdf["year"] = pdf["year"].astype("int64")
    pdf = _order(pdf, ["year", "total_laid_off", "company"], [True, False, True])

    # single scan carrying (year, rank, last total) across the sorted rows
    ranks: list[int] = []
    current_year: Any = None
    rank = 0
    last: Any = None
    for year, total in zip(pdf["year"], pdf["total_laid_off"]):
        if year != current_year:
            current_year, rank, last = year, 1, total
        elif not _same_value(total, last):
            rank, last = rank + 1, total
        ranks.append(rank)

    pdf["ranking"] = ranks
    pdf = pdf[pdf["ranking"] <= limit]
    return pdf[["company", "year", "total_laid_off", "ranking"]].reset_index(drop=True)


def gold_monthly_rolling_total(ddf: Any) -> pd.DataFrame:
    """Return monthly layoffs with a cumulative total, oldest month first.

    Each `rolling_total` is the sum of the non-null monthly totals up to and
    including that month; it stays null until the first non-null month.

    Returns:
        DataFrame with columns: `year`, `month`, `laid_off`, `rolling_total`.
    """
    pdf = _sum_by(_dated(ddf), ["year", "month"]).compute().reset_index()
    pdf = pdf.rename(columns={"total_laid_off": "laid_off"})
    pdf["year"] = pdf["year"].astype("int64")
    pdf["month"] = pdf["month"].astype("int64")
    pdf = _order(pdf, ["year", "month"], [True, True])

    rolling: list[Any] = []
    running: int | None = None
    for value in pdf["laid_off"]:
        if not pd.isna(value):
            running = (running or 0) + int(value)
        rolling.append(running)

    pdf["rolling_total"] = pd.array(rolling, dtype="Int64")
    return pdf


# =========================================================
# REGISTRY
# =========================================================

# Upsert key per Gold collection; None means "key on record_key".
GOLD_KEYS: dict[str, list[str] | None] = {
    "gold_max_metrics": [],
    "gold_date_range": [],
    "gold_yearly_totals": ["year"],
    "gold_stage_totals": ["stage"],
    "gold_full_layoffs_by_funds": None,
    "gold_full_layoffs_by_count": None,
    "gold_top_industries_by_full_layoffs": ["industry"],
    "gold_top_companies_by_total": ["company"],
    "gold_industry_totals": ["industry"],
    "gold_industry_avg_percentage": ["industry"],
    "gold_country_totals": ["country"],
    "gold_top_companies_per_year": ["year", "company"],
    "gold_country_avg_percentage": ["country"],
    "gold_monthly_rolling_total": ["year", "month"],
}


def build_gold_tables(ddf: Any, top_n: int = 5) -> dict[str, pd.DataFrame]:
    """Build every Gold table, keyed by its collection name.

    Args:
        ddf: Dask DataFrame of cleaned records.
        top_n: Rank limit for `gold_top_companies_per_year`.
    """
    return {
        "gold_max_metrics": gold_max_metrics(ddf),
        "gold_date_range": gold_date_range(ddf),
        "gold_yearly_totals": gold_yearly_totals(ddf),
        "gold_stage_totals": gold_stage_totals(ddf),
        "gold_full_layoffs_by_funds": gold_full_layoffs_by_funds(ddf),
        "gold_full_layoffs_by_count": gold_full_layoffs_by_count(ddf),
        "gold_top_industries_by_full_layoffs": gold_top_industries_by_full_layoffs(ddf),
        "gold_top_companies_by_total": gold_top_companies_by_total(ddf),
        "gold_industry_totals": gold_industry_totals(ddf),
        "gold_industry_avg_percentage": gold_industry_avg_percentage(ddf),
        "gold_country_totals": gold_country_totals(ddf),
        "gold_top_companies_per_year": gold_top_companies_per_year(ddf, limit=top_n),
        "gold_country_avg_percentage": gold_country_avg_percentage(ddf),
        "gold_monthly_rolling_total": gold_monthly_rolling_total(ddf),
    }
