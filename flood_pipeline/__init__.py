"""Flood-control project analytics pipeline.

Validates, cleans and enriches a CSV of public-works flood-control projects and
produces three analytic reports plus a scalar summary.
"""

__version__ = "0.1.0"
