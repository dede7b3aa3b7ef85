from __future__ import annotations

from typing import Any

import dask.dataframe as dd
import pandas as pd
import pytest

from layoffs_pipeline.aggregate.build_gold import (
    GOLD_KEYS,
    build_gold_tables,
    gold_country_avg_percentage,
    gold_country_totals,
    gold_date_range,
    gold_full_layoffs_by_count,
    gold_full_layoffs_by_funds,
    gold_industry_avg_percentage,
    gold_industry_totals,
    gold_max_metrics,
    gold_monthly_rolling_total,
    gold_stage_totals,
    gold_top_companies_by_total,
    gold_top_companies_per_year,
    gold_top_industries_by_full_layoffs,
    gold_yearly_totals,
)
from layoffs_pipeline.clean.pipeline import run_cleaning
from layoffs_pipeline.models import BUSINESS_FIELDS


def _rec(
    company: str,
    total: int | None = None,
    pct: float | None = None,
    date: str | None = "2022-06-01",
    **overrides: Any,
) -> dict[str, Any]:
    rec: dict[str, Any] = {
        "company": company,
        "location": "SF Bay Area",
        "industry": "Retail",
        "total_laid_off": total,
        "percentage_laid_off": pct,
        "date": date,
        "stage": "Series B",
        "country": "United States",
        "funds_raised_millions": None,
    }
    rec.update(overrides)
    return rec


def _clean_ddf(*recs: dict[str, Any], npartitions: int = 2) -> Any:
    pdf = pd.DataFrame(list(recs), columns=list(BUSINESS_FIELDS))
    pdf["total_laid_off"] = pdf["total_laid_off"].astype("Int64")
    pdf["funds_raised_millions"] = pdf["funds_raised_millions"].astype("Int64")
    pdf["percentage_laid_off"] = pdf["percentage_laid_off"].astype("float64")
    pdf["date"] = pd.to_datetime(pdf["date"])
    return dd.from_pandas(pdf, npartitions=npartitions)


def test_max_metrics_and_date_range() -> None:
    ddf = _clean_ddf(
        _rec("A", total=10, pct=0.2, date="2020-03-11"),
        _rec("B", total=12000, pct=1.0, date="2023-03-06"),
        _rec("C", total=None, pct=0.5, date=None),
    )
    m = gold_max_metrics(ddf)
    assert int(m.loc[0, "max_total_laid_off"]) == 12000
    assert m.loc[0, "max_percentage_laid_off"] == pytest.approx(1.0)

    r = gold_date_range(ddf)
    assert r.loc[0, "min_date"] == pd.Timestamp("2020-03-11")
    assert r.loc[0, "max_date"] == pd.Timestamp("2023-03-06")


def test_yearly_totals_newest_year_first() -> None:
    ddf = _clean_ddf(
        _rec("A", total=100, date="2020-04-01"),
        _rec("B", total=50, date="2022-01-15"),
        _rec("C", total=25, date="2022-11-30"),
    )
    out = gold_yearly_totals(ddf)
    assert out["year"].tolist() == [2022, 2020]
    assert [int(v) for v in out["total_laid_off"]] == [75, 100]


def test_stage_totals_skip_nulls_and_sort_descending() -> None:
    ddf = _clean_ddf(
        _rec("A", total=100, stage="Post-IPO"),
        _rec("B", total=300, stage="Seed"),
        _rec("C", total=None, pct=0.5, stage="Seed"),
        _rec("D", total=None, pct=0.3, stage="Acquired"),
    )
    out = gold_stage_totals(ddf)
    assert out["stage"].tolist() == ["Seed", "Post-IPO", "Acquired"]
    assert int(out.loc[0, "total_laid_off"]) == 300
    assert pd.isna(out.loc[2, "total_laid_off"])


def test_full_layoffs_orderings() -> None:
    ddf = _clean_ddf(
        _rec("A", total=50, pct=1.0, funds_raised_millions=10),
        _rec("B", total=900, pct=1.0, funds_raised_millions=None),
        _rec("C", total=200, pct=1.0, funds_raised_millions=400),
        _rec("D", total=5000, pct=0.5, funds_raised_millions=1000),
    )
    by_funds = gold_full_layoffs_by_funds(ddf)
    assert by_funds["company"].tolist() == ["C", "A", "B"]

    by_count = gold_full_layoffs_by_count(ddf)
    assert by_count["company"].tolist() == ["B", "C", "A"]
    assert set(BUSINESS_FIELDS) <= set(by_count.columns)


def test_top_industries_count_distinct_companies_with_full_layoffs() -> None:
    ddf = _clean_ddf(
        _rec("A", total=10, pct=1.0, industry="Food"),
        _rec("A", total=20, pct=1.0, industry="Food", date="2022-09-01"),
        _rec("B", total=30, pct=1.0, industry="Food"),
        _rec("C", total=40, pct=1.0, industry="Retail"),
        _rec("D", total=50, pct=0.4, industry="Retail"),
    )
    out = gold_top_industries_by_full_layoffs(ddf)
    assert out["industry"].tolist() == ["Food", "Retail"]
    assert [int(v) for v in out["company_count"]] == [2, 1]


def test_company_industry_and_country_totals() -> None:
    ddf = _clean_ddf(
        _rec("Amazon", total=10000, industry="Retail", country="United States"),
        _rec("Amazon", total=8000, industry="Retail", country="United States", date="2023-01-04"),
        _rec("Meta", total=11000, industry="Consumer", country="United States"),
        _rec("Philips", total=6000, industry="Healthcare", country="Netherlands"),
        _rec("Zalando", total=None, pct=0.1, industry="Retail", country="Germany"),
    )
    companies = gold_top_companies_by_total(ddf)
    assert companies["company"].tolist()[:3] == ["Amazon", "Meta", "Philips"]
    assert int(companies.loc[0, "total_laid_off"]) == 18000

    industries = gold_industry_totals(ddf)
    assert industries["industry"].tolist() == ["Retail", "Consumer", "Healthcare"]
    retail = industries.set_index("industry").loc["Retail"]
    assert int(retail["total_laid_off"]) == 18000
    assert int(retail["company_count"]) == 2

    countries = gold_country_totals(ddf)
    assert countries["country"].tolist()[0] == "United States"
    us = countries.set_index("country").loc["United States"]
    assert int(us["total_laid_off"]) == 29000
    assert int(us["company_count"]) == 2


def test_average_percentages_are_rounded() -> None:
    ddf = _clean_ddf(
        _rec("A", pct=0.123, industry="Aerospace", country="Australia"),
        _rec("B", pct=0.2, industry="Aerospace", country="Australia"),
        _rec("C", pct=0.05, industry="Finance", country="India"),
        _rec("D", total=10, pct=None, industry="Finance", country="India"),
        _rec("E", pct=0.31, industry="Finance", country="India"),
    )
    industries = gold_industry_avg_percentage(ddf)
    assert industries["industry"].tolist() == ["Finance", "Aerospace"]
    assert industries["avg_percentage"].tolist() == pytest.approx([0.18, 0.16])

    countries = gold_country_avg_percentage(ddf)
    assert countries["country"].tolist() == ["India", "Australia"]
    assert [int(v) for v in countries["company_count"]] == [3, 2]
    assert countries["avg_percentage"].tolist() == pytest.approx([0.18, 0.16])


@pytest.mark.parametrize("npartitions", [1, 2, 3])
def test_company_counts_keep_the_null_key_group(npartitions: int) -> None:
    ddf = _clean_ddf(
        _rec("A", total=10, pct=1.0),
        _rec("D", total=5, pct=1.0),
        _rec("B", total=20, pct=1.0, industry=None),
        _rec("C", total=30, pct=1.0, industry=None, country=None),
        npartitions=npartitions,
    )

    full = gold_top_industries_by_full_layoffs(ddf)
    assert full["industry"].tolist()[0] == "Retail"
    assert pd.isna(full["industry"].tolist()[1])
    assert full["company_count"].tolist() == [2, 2]
    assert pd.api.types.is_integer_dtype(full["company_count"])

    industries = gold_industry_totals(ddf)
    assert pd.isna(industries.loc[0, "industry"])
    assert industries.loc[1, "industry"] == "Retail"
    assert [int(v) for v in industries["total_laid_off"]] == [50, 15]
    assert industries["company_count"].tolist() == [2, 2]
    assert pd.api.types.is_integer_dtype(industries["company_count"])

    countries = gold_country_avg_percentage(ddf)
    assert countries.loc[0, "country"] == "United States"
    assert pd.isna(countries.loc[1, "country"])
    assert countries["company_count"].tolist() == [3, 1]
    assert pd.api.types.is_integer_dtype(countries["company_count"])


def test_top_companies_per_year_uses_dense_rank() -> None:
    ddf = _clean_ddf(
        _rec("A", total=60, date="2022-01-10"),
        _rec("A", total=40, date="2022-05-10"),
        _rec("B", total=100, date="2022-02-01"),
        _rec("C", total=50, date="2022-03-01"),
        _rec("D", total=10, date="2022-04-01"),
        _rec("E", total=5, date="2023-01-01"),
        _rec("F", total=999, date=None),
    )
    out = gold_top_companies_per_year(ddf, limit=2)
    rows = list(zip(out["company"], out["year"], out["ranking"]))
    assert rows == [
        ("A", 2022, 1),
        ("B", 2022, 1),
        ("C", 2022, 2),
        ("E", 2023, 1),
    ]


def test_monthly_rolling_total_is_a_running_sum() -> None:
    ddf = _clean_ddf(
        _rec("A", total=60, date="2020-03-10"),
        _rec("B", total=40, date="2020-03-20"),
        _rec("C", total=50, date="2020-04-01"),
        _rec("D", total=500, date=None),
    )
    out = gold_monthly_rolling_total(ddf)
    assert list(zip(out["year"], out["month"])) == [(2020, 3), (2020, 4)]
    assert [int(v) for v in out["laid_off"]] == [100, 50]
    assert [int(v) for v in out["rolling_total"]] == [100, 150]


def test_monthly_rolling_total_is_non_decreasing_prefix_sum() -> None:
    ddf = _clean_ddf(
        *[_rec(f"C{i}", total=(i * 37) % 11, date=f"2021-{(i % 12) + 1:02d}-15") for i in range(30)]
    )
    out = gold_monthly_rolling_total(ddf)
    rolling = [int(v) for v in out["rolling_total"]]
    monthly = [int(v) for v in out["laid_off"]]
    assert rolling == sorted(rolling)
    assert rolling == [sum(monthly[: i + 1]) for i in range(len(monthly))]


def test_united_states_variants_are_summed_together() -> None:
    raw = pd.DataFrame(
        [
            _rec("Acme", total=100, pct="0.1", date="3/1/2022", country="United States of America"),
            _rec("Acme", total=50, pct="0.05", date="4/1/2022", country="United States"),
        ],
        columns=list(BUSINESS_FIELDS),
    )
    cleaned = run_cleaning(raw).cleaned
    ddf = dd.from_pandas(cleaned, npartitions=1)

    companies = gold_top_companies_by_total(ddf)
    assert int(companies.set_index("company").loc["Acme", "total_laid_off"]) == 150

    countries = gold_country_totals(ddf)
    assert countries["country"].tolist() == ["United States"]


def test_build_gold_tables_covers_every_collection() -> None:
    ddf = _clean_ddf(_rec("A", total=10, pct=1.0), _rec("B", total=20, pct=0.5))
    tables = build_gold_tables(ddf, top_n=3)
    assert set(tables) == set(GOLD_KEYS)
    assert all(isinstance(t, pd.DataFrame) for t in tables.values())
