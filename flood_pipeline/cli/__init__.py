"""Command-line interface for the flood-control project pipeline."""
