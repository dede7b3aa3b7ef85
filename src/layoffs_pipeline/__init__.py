"""layoffs_pipeline package.

Contains modules for loading the raw global layoffs dataset, cleaning it
(deduplication, normalization, industry backfill, filtering), building
Gold-layer aggregations, and utilities for serving a Streamlit dashboard.

Architecture:
- Raw (CSV) → Clean → Gold, with Clean and Gold persisted in MongoDB
- Dask is used for partitioned normalization and Gold groupbys
- Pydantic models validate the Raw and Clean layers
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
