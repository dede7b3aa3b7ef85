"""Command-line interface for orchestrating the pipeline.

Provides subcommands: `clean`, `gold`, `report`, and `all`. Each command
is implemented as a `cmd_*` function that accepts an argparse namespace.
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, cast

import dask.dataframe as dd
import pandas as pd
from dotenv import load_dotenv

from layoffs_pipeline.config import DATE_ERROR_POLICIES, Settings, get_settings
from layoffs_pipeline.logging_config import configure_logging

# INGEST
from layoffs_pipeline.ingest.fetch_csv import fetch_layoffs_csv
from layoffs_pipeline.ingest.load_csv import load_layoffs_csv

# CLEAN
from layoffs_pipeline.clean.pipeline import run_cleaning
from layoffs_pipeline.clean.load_clean import load_clean_to_mongo

# GOLD
from layoffs_pipeline.aggregate.build_gold import GOLD_KEYS, build_gold_tables
from layoffs_pipeline.aggregate.load_gold import load_gold

log = logging.getLogger(__name__)


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _resolve_csv(args: argparse.Namespace, s: Settings) -> Path:
    """Return the raw CSV path, downloading it first when a URL is configured.

    Raises:
        RuntimeError: if the file does not exist and cannot be downloaded.
    """
    path = Path(args.csv) if getattr(args, "csv", None) else s.layoffs_csv_path
    if not path.exists() and s.layoffs_csv_url:
        path = fetch_layoffs_csv(s.layoffs_csv_url, s.layoffs_data_dir, path.name)
    if not path.exists():
        raise RuntimeError(
            f"Raw layoffs CSV not found at {path}. "
            "Pass --csv or set LAYOFFS_CSV_PATH / LAYOFFS_CSV_URL in .env."
        )
    return path


def _clean(args: argparse.Namespace, s: Settings) -> pd.DataFrame:
    """Load the raw CSV and run the cleaning pipeline."""
    raw = load_layoffs_csv(_resolve_csv(args, s))
    date_errors = getattr(args, "date_errors", None) or s.date_errors
    result = run_cleaning(raw, npartitions=args.partitions, date_errors=date_errors)
    return result.cleaned


def _gold_tables(cleaned: pd.DataFrame, args: argparse.Namespace) -> dict[str, pd.DataFrame]:
    """Wrap the cleaned frame in Dask and build every Gold table."""
    if cleaned.empty:
        raise RuntimeError("Cleaned layoffs set is empty. Check the raw CSV.")

    dd_mod = cast(Any, dd)
    ddf = dd_mod.from_pandas(cleaned, npartitions=max(1, args.partitions))
    return build_gold_tables(ddf, top_n=args.top_n)


def _load_gold_tables(tables: dict[str, pd.DataFrame]) -> None:
    for name, pdf in tables.items():
        load_gold(pdf, name, GOLD_KEYS[name])
    log.info("Gold layer successfully generated.")


# --------------------------------------------------
# CLEAN
# --------------------------------------------------
def cmd_clean(args: argparse.Namespace) -> None:
    """Clean the raw CSV and (unless --no-load) upsert it into `clean_layoffs`."""
    s = get_settings()
    cleaned = _clean(args, s)

    if args.no_load:
        log.info("Cleaned %d rows (not loaded).", len(cleaned))
        return

    good, bad = load_clean_to_mongo(cleaned)
    log.info("clean_layoffs written (good=%d bad=%d)", good, bad)


# --------------------------------------------------
# GOLD
# --------------------------------------------------
def cmd_gold(args: argparse.Namespace) -> None:
    """Compute Gold aggregations from the cleaned set and upsert into Mongo.

    Args:
        args: argparse namespace with `csv`, `partitions` and `top_n`.
    """
    s = get_settings()
    _load_gold_tables(_gold_tables(_clean(args, s), args))


# --------------------------------------------------
# REPORT
# --------------------------------------------------
def cmd_report(args: argparse.Namespace) -> None:
    """Print every Gold table to stdout without touching MongoDB."""
    s = get_settings()
    tables = _gold_tables(_clean(args, s), args)

    for name, pdf in tables.items():
        print(f"\n== {name} ({len(pdf)} rows) ==")
        print(pdf.to_string(index=False) if not pdf.empty else "(no rows)")


# --------------------------------------------------
# ALL
# --------------------------------------------------
def cmd_all(args: argparse.Namespace) -> None:
    """Convenience: clean → load clean → build and load gold in one run."""
    s = get_settings()
    cleaned = _clean(args, s)
    load_clean_to_mongo(cleaned)
    _load_gold_tables(_gold_tables(cleaned, args))


# --------------------------------------------------
# CLI
# --------------------------------------------------
def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--csv", type=str, default=None, help="Raw layoffs CSV path.")
    p.add_argument("--partitions", type=int, default=1)
    p.add_argument("--date-errors", choices=DATE_ERROR_POLICIES, default=None)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    The returned parser has subcommands `clean`, `gold`, `report`, and `all`
    with commonly used options configured.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    p = argparse.ArgumentParser(prog="layoffs_pipeline")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_clean = sub.add_parser("clean")
    _add_common(p_clean)
    p_clean.add_argument("--no-load", action="store_true")

    p_gold = sub.add_parser("gold")
    _add_common(p_gold)
    p_gold.add_argument("--top-n", type=int, default=5)

    p_report = sub.add_parser("report")
    _add_common(p_report)
    p_report.add_argument("--top-n", type=int, default=5)

    p_all = sub.add_parser("all")
    _add_common(p_all)
    p_all.add_argument("--top-n", type=int, default=5)

    return p


def main() -> None:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    load_dotenv()
    configure_logging(Path("logs/pipeline.log"))

    args = build_parser().parse_args()

    if args.cmd == "clean":
        cmd_clean(args)
    elif args.cmd == "gold":
        cmd_gold(args)
    elif args.cmd == "report":
        cmd_report(args)
    elif args.cmd == "all":
        cmd_all(args)
    else:
        raise SystemExit(2)


if __name__ == "__main__":
    main()
