"""Cleaning utilities for the pipeline.

Provides the staging/deduplication step, text and date normalization, the
same-company industry backfill, the unmeasured-row filter, and the loader
that persists the Clean layer into MongoDB.
"""
