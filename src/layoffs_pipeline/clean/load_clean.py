"""Load cleaned layoff records into MongoDB with batched upserts.

Module notes:
- Each record is keyed by `record_key`, a hash of its business fields, which
  is unique because the Clean layer holds no exact duplicates.
- Dates are normalized to datetimes for BSON compatibility.
"""
from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import Any

import pandas as pd

from layoffs_pipeline.clean.validate import validate_partition
from layoffs_pipeline.config import get_settings
from layoffs_pipeline.db import bson_safe, bulk_upsert, get_client, get_db
from layoffs_pipeline.models import BUSINESS_FIELDS

log = logging.getLogger(__name__)

CLEAN_COLLECTION = "clean_layoffs"
BATCH_SIZE = 1000


def _key_value(v: Any) -> Any:
    if isinstance(v, datetime):
        return v.date().isoformat()
    return v


def record_key(doc: dict[str, Any]) -> str:
    """Return a stable SHA-1 over the business-field values of `doc`."""
    safe = bson_safe(doc)
    values = [_key_value(safe.get(f)) for f in BUSINESS_FIELDS]
    payload = json.dumps(values, default=str, separators=(",", ":"))
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


def load_clean_to_mongo(pdf: pd.DataFrame) -> tuple[int, int]:
    """Validate the cleaned frame and upsert it into `clean_layoffs`.

    Returns:
        Tuple `(good_rows, bad_rows)`.
    """
    log.info("Loading clean layoffs into MongoDB...")

    good_docs, bad = validate_partition(pdf)

    cleaned_ts = datetime.now(timezone.utc)
    docs = []
    for rec in good_docs:
        doc = bson_safe(rec)
        doc["record_key"] = record_key(rec)
        doc["cleaned_ts"] = cleaned_ts
        docs.append(doc)

    s = get_settings()
    client = get_client(s.mongo_uri)
    collection = get_db(client, s.mongo_db)[CLEAN_COLLECTION]
    try:
        good = bulk_upsert(collection, docs, ["record_key"], batch_size=BATCH_SIZE)
    finally:
        client.close()

    log.info("Clean load complete: good=%d bad=%d", good, bad)
    return good, bad
