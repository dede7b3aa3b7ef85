from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from layoffs_pipeline.models import GoldTopCompanyPerYear, LayoffRecord, RawLayoff


def test_raw_layoff_validates() -> None:
    rec = {
        "company": " Included Health",
        "location": "SF Bay Area",
        "industry": "Healthcare",
        "total_laid_off": None,
        "percentage_laid_off": "0.06",
        "date": "7/25/2022",
        "stage": "Series E",
        "country": "United States",
        "funds_raised_millions": 272,
    }
    RawLayoff.model_validate(rec)


def test_raw_layoff_rejects_unknown_columns() -> None:
    with pytest.raises(ValidationError):
        RawLayoff.model_validate({"company": "X", "row_num": 2})


def test_layoff_record_rejects_fraction_above_one() -> None:
    with pytest.raises(ValidationError):
        LayoffRecord.model_validate(
            {"company": "X", "percentage_laid_off": 1.5, "date": date(2022, 1, 1)}
        )


def test_layoff_record_rejects_negative_count() -> None:
    with pytest.raises(ValidationError):
        LayoffRecord.model_validate({"company": "X", "total_laid_off": -1})


def test_top_company_rank_starts_at_one() -> None:
    with pytest.raises(ValidationError):
        GoldTopCompanyPerYear.model_validate(
            {"company": "X", "year": 2022, "total_laid_off": 10, "ranking": 0}
        )
