"""Utilities for loading Gold DataFrames into MongoDB.

Gold datasets are small and already materialized as pandas. This module
centralizes the upsert strategy, optional Pydantic row checks, and logging.
"""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd
from pydantic import BaseModel
from pymongo.collection import Collection

from layoffs_pipeline.clean.load_clean import record_key
from layoffs_pipeline.config import get_settings
from layoffs_pipeline.db import (
    bson_safe,
    bulk_upsert,
    get_client,
    get_db,
    plain_records,
    prune_missing,
)
from layoffs_pipeline.models import (
    GoldMonthlyRollingTotal,
    GoldTopCompanyPerYear,
    GoldYearlyTotal,
)

log = logging.getLogger(__name__)

GOLD_MODELS: dict[str, type[BaseModel]] = {
    "gold_yearly_totals": GoldYearlyTotal,
    "gold_top_companies_per_year": GoldTopCompanyPerYear,
    "gold_monthly_rolling_total": GoldMonthlyRollingTotal,
}


def gold_documents(
    pdf: pd.DataFrame,
    collection_name: str,
    key_fields: list[str] | None,
) -> list[dict[str, Any]]:
    """Turn a Gold DataFrame into BSON-safe documents.

    Rows of tables listed in `GOLD_MODELS` are validated first; a failure is a
    programming error and propagates. When `key_fields` is None the table is a
    record listing: each document gets a `record_key` and a 1-based `position`
    holding the table's row order.
    """
    model = GOLD_MODELS.get(collection_name)
    docs: list[dict[str, Any]] = []
    for position, row in enumerate(plain_records(pdf), start=1):
        if model is not None:
            model.model_validate(row)
        doc = bson_safe(row)
        if key_fields is None:
            doc["record_key"] = record_key(row)
            doc["position"] = position
        docs.append(doc)
    return docs


def write_gold(
    collection: Collection[dict[str, Any]],
    pdf: pd.DataFrame,
    key_fields: list[str] | None,
) -> int:
    """Replace the contents of a Gold collection with `pdf`.

    Rows are upserted by key, then documents whose key is no longer in the
    table are deleted. An empty table clears the collection.

    Returns:
        Number of rows written.
    """
    keys = key_fields if key_fields is not None else ["record_key"]
    docs = gold_documents(pdf, collection.name, key_fields)
    written = bulk_upsert(collection, docs, keys) if docs else 0
    prune_missing(collection, docs, keys)
    return written


def load_gold(
    pdf: pd.DataFrame,
    collection_name: str,
    key_fields: list[str] | None,
) -> int:
    """Safely load a GOLD aggregation into MongoDB.

    Strategy:
    - Convert rows to BSON-safe documents (validated where a model exists)
    - Upsert in batches keyed by `key_fields` (or `record_key`)
    - Delete documents left over from earlier builds

    Args:
        pdf: Pandas DataFrame representing the gold dataset.
        collection_name: Target MongoDB collection name.
        key_fields: Fields used as the upsert key; None keys on `record_key`.

    Returns:
        Number of rows written.
    """
    log.info("Generating gold collection: %s", collection_name)

    if pdf.empty:
        log.warning("No rows to load for %s; clearing it", collection_name)

    s = get_settings()
    client = get_client(s.mongo_uri)
    try:
        written = write_gold(get_db(client, s.mongo_db)[collection_name], pdf, key_fields)
    finally:
        client.close()

    log.info("Gold load complete for %s: %d rows", collection_name, written)
    return written
