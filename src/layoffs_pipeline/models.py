"""Pydantic models used for Raw, Clean and Gold validation.

These models define the expected schema for raw CSV rows, cleaned layoff
records, and several Gold outputs used by the dashboard and tests.
"""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

# Every column that identifies a record; duplicates are judged across all of them.
BUSINESS_FIELDS: tuple[str, ...] = (
    "company",
    "location",
    "industry",
    "total_laid_off",
    "percentage_laid_off",
    "date",
    "stage",
    "country",
    "funds_raised_millions",
)

INTEGER_FIELDS: tuple[str, ...] = ("total_laid_off", "funds_raised_millions")


class RawLayoff(BaseModel):
    """Schema for a raw layoff row as read from the source CSV.

    `percentage_laid_off` and `date` are still text at this stage.
    """
    model_config = ConfigDict(extra="forbid")
    company: str
    location: str | None = None
    industry: str | None = None
    total_laid_off: int | None = Field(None, ge=0)
    percentage_laid_off: str | None = None
    date: str | None = None
    stage: str | None = None
    country: str | None = None
    funds_raised_millions: int | None = Field(None, ge=0)


class LayoffRecord(BaseModel):
    """Schema for a cleaned layoff record.

    Attributes:
        company: Trimmed company name.
        location: Free-form location (city/metro area).
        industry: Canonical industry, or None when no sibling record knows it.
        total_laid_off: Number of employees laid off.
        percentage_laid_off: Fraction of the workforce laid off, in [0, 1].
        date: Calendar date of the layoff event.
        stage: Funding/business stage (e.g. 'Series B', 'Post-IPO').
        country: Canonical country name.
        funds_raised_millions: Funds raised by the company, in millions.
    """
    model_config = ConfigDict(extra="forbid")
    company: str
    location: str | None = None
    industry: str | None = None
    total_laid_off: int | None = Field(None, ge=0)
    percentage_laid_off: float | None = Field(None, ge=0.0, le=1.0)
    date: dt.date | None = None
    stage: str | None = None
    country: str | None = None
    funds_raised_millions: int | None = Field(None, ge=0)


class GoldYearlyTotal(BaseModel):
    """Gold model for total layoffs per calendar year."""
    model_config = ConfigDict(extra="forbid")
    year: int | None = Field(None, ge=1900, le=2100)
    total_laid_off: int | None = Field(None, ge=0)


class GoldTopCompanyPerYear(BaseModel):
    """Gold model for the dense-ranked top companies of each year."""
    model_config = ConfigDict(extra="forbid")
    company: str | None
    year: int = Field(..., ge=1900, le=2100)
    total_laid_off: int | None = Field(None, ge=0)
    ranking: int = Field(..., ge=1)


class GoldMonthlyRollingTotal(BaseModel):
    """Gold model for monthly layoffs with a running total."""
    model_config = ConfigDict(extra="forbid")
    year: int = Field(..., ge=1900, le=2100)
    month: int = Field(..., ge=1, le=12)
    laid_off: int | None = Field(None, ge=0)
    rolling_total: int | None = Field(None, ge=0)
