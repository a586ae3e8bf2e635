"""Fund-level aggregation helpers.

This package rolls the per-asset time series up into fund-wide statistics and
flattens finished analyses into pandas tables for charting.
"""
