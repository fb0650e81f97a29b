"""Contingency-table chi-square tests, partition search and feature selection for CSV data."""

__version__ = "1.0.0"

__all__ = ["bitmask", "table", "contingency", "feature_selector", "cli"]