"""Gold-layer aggregation helpers.

This package contains routines that convert the cleaned layoffs into
analytical Gold datasets (yearly and monthly trends, company rankings,
industry and country breakdowns) intended to be small enough to compute
eagerly and store in MongoDB as read-optimized collections.
"""
