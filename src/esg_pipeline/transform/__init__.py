"""Per-metric and per-asset transforms.

`summarize` computes point statistics of one time series; `transform_asset`
applies it to every slot of the fixed metric catalog for one asset.
"""
