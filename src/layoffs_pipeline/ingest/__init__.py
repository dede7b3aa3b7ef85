"""Raw-layer ingestion: download the layoffs CSV and load it as a checked frame."""
