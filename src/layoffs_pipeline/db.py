"""MongoDB helpers and bulk upsert utility.

Centralizes creation of Mongo clients, conversion of pandas rows into
BSON-safe documents, and the batched upsert used by the Clean and Gold loaders.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Iterable, Sequence

import certifi
import numpy as np
import pandas as pd
from pymongo import MongoClient, UpdateOne
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

log = logging.getLogger(__name__)


def get_client(uri: str) -> MongoClient:
    """Return a configured PyMongo MongoClient for the provided URI.

    Args:
        uri: MongoDB connection URI.

    Returns:
        Configured MongoClient instance.
    """
    return MongoClient(
        uri,
        tls=True,
        tlsCAFile=certifi.where(),
        serverSelectionTimeoutMS=30000,
        socketTimeoutMS=30000,
        connectTimeoutMS=30000,
    )


def get_db(
    client: MongoClient[dict[str, Any]],
    db_name: str,
) -> Database[dict[str, Any]]:
    """Return the named Database instance from a MongoClient."""
    return client[db_name]


def plain_records(pdf: pd.DataFrame) -> list[dict[str, Any]]:
    """Return the rows of `pdf` as dicts with None in place of NaN/NA/NaT."""
    obj = pdf.astype(object)
    return obj.where(pdf.notna(), None).to_dict(orient="records")


def bson_safe(doc: dict[str, Any]) -> dict[str, Any]:
    """Convert pandas/numpy values in a row dict to Mongo-safe Python types.

    NaN, NaT and pd.NA become None, numpy scalars become Python scalars, and
    plain dates become midnight datetimes.
    """
    out: dict[str, Any] = {}
    for k, v in doc.items():
        if v is None or (not isinstance(v, (list, dict, str)) and pd.isna(v)):
            out[k] = None
        elif isinstance(v, pd.Timestamp):
            out[k] = v.to_pydatetime()
        elif isinstance(v, np.integer):
            out[k] = int(v)
        elif isinstance(v, np.floating):
            out[k] = float(v)
        elif isinstance(v, np.bool_):
            out[k] = bool(v)
        elif isinstance(v, date) and not isinstance(v, datetime):
            out[k] = datetime.combine(v, datetime.min.time())
        else:
            out[k] = v
    return out


def bulk_upsert(
    collection: Collection[dict[str, Any]],
    docs: Iterable[dict[str, Any]],
    key_fields: Sequence[str],
    batch_size: int = 1000,
) -> int:
    """Bulk upsert documents using `key_fields` as the selector.

    An empty `key_fields` selects any document, which suits single-row tables.

    Args:
        collection: Target PyMongo collection.
        docs: Iterable of BSON-safe document dictionaries.
        key_fields: Document keys that together identify a document.
        batch_size: Number of ops per bulk_write call.

    Returns:
        Integer number of documents written.

    Raises:
        PyMongoError: if a batch fails; the batch run is aborted.
    """
    ops: list[UpdateOne] = []
    written = 0

    def _flush() -> None:
        try:
            collection.bulk_write(ops, ordered=False)
        except PyMongoError as e:
            log.error("bulk_upsert into %s failed: %s", collection.name, e)
            raise
        ops.clear()

    for d in docs:
        ops.append(
            UpdateOne(
                {k: d.get(k) for k in key_fields},
                {"$set": d},
                upsert=True,
            )
        )
        written += 1

        if len(ops) >= batch_size:
            _flush()

    if ops:
        _flush()

    return written


def prune_missing(
    collection: Collection[dict[str, Any]],
    docs: Sequence[dict[str, Any]],
    key_fields: Sequence[str],
) -> int:
    """Delete documents whose key is not among `docs`.

    Used after upserting a fully rebuilt table so rows that dropped out of the
    rebuild do not linger. An empty `docs` clears the collection.

    Returns:
        Number of documents deleted.
    """
    if docs:
        selector: dict[str, Any] = {"$nor": [{k: d.get(k) for k in key_fields} for d in docs]}
    else:
        selector = {}
    try:
        deleted = collection.delete_many(selector).deleted_count
    except PyMongoError as e:
        log.error("prune of %s failed: %s", collection.name, e)
        raise
    if deleted:
        log.info("Pruned %d stale documents from %s", deleted, collection.name)
    return deleted
