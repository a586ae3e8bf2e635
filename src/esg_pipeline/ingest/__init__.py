"""Input handling for the pipeline.

Parses serialized fund documents and normalizes the supported input shapes
into the canonical per-category time series layout.
"""
