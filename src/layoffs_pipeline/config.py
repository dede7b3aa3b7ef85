"""Configuration helpers and Settings container.

This module provides a small `Settings` dataclass and `get_settings` which
reads environment variables (including a check that `DATE_ERRORS` names a
known policy).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os

from dotenv import load_dotenv

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")

DATE_ERROR_POLICIES = ("raise", "coerce")


@dataclass(frozen=True)
class Settings:
    """Container for pipeline configuration read from the environment.

    Attributes:
        mongo_uri: MongoDB connection URI.
        mongo_db: Target MongoDB database name.
        layoffs_csv_path: Local path of the raw layoffs CSV.
        layoffs_csv_url: Optional URL to download the CSV from when missing.
        layoffs_data_dir: Local cache directory for downloaded CSVs.
        date_errors: Policy for unparseable dates, "raise" or "coerce".
    """
    mongo_uri: str
    mongo_db: str
    layoffs_csv_path: Path
    layoffs_csv_url: str | None
    layoffs_data_dir: Path
    date_errors: str


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if `DATE_ERRORS` is not one of "raise" or "coerce".
    """
    mongo_uri = os.getenv(
        "MONGO_URI",
        "mongodb://localhost:27017,localhost:27018,localhost:27019/?replicaSet=rs0",
    )
    mongo_db = os.getenv("MONGO_DB", "layoffs")
    layoffs_csv_path = Path(os.getenv("LAYOFFS_CSV_PATH", "data/layoffs.csv"))
    layoffs_csv_url = os.getenv("LAYOFFS_CSV_URL", "").strip() or None
    layoffs_data_dir = Path(os.getenv("LAYOFFS_DATA_DIR", "data"))
    date_errors = os.getenv("DATE_ERRORS", "raise").strip().lower()

    if date_errors not in DATE_ERROR_POLICIES:
        raise RuntimeError(
            f"DATE_ERRORS must be one of {DATE_ERROR_POLICIES}, got {date_errors!r}."
        )

    return Settings(
        mongo_uri=mongo_uri,
        mongo_db=mongo_db,
        layoffs_csv_path=layoffs_csv_path,
        layoffs_csv_url=layoffs_csv_url,
        layoffs_data_dir=layoffs_data_dir,
        date_errors=date_errors,
    )
