"""Fixed ESG metric catalog.

Every asset carries exactly these metric slots. A metric is addressed by its
path below `time_series.metrics`, e.g. ``("social", "board_diversity",
"female_percentage")`` or, in messages, ``"social.board_diversity.female_percentage"``.
"""

from __future__ import annotations

from typing import Any, Mapping

MetricPath = tuple[str, ...]

CATEGORIES: tuple[str, ...] = ("environmental", "social", "governance")

METRIC_PATHS: tuple[MetricPath, ...] = (
    ("environmental", "CO2_emission"),
    ("environmental", "water_usage"),
    ("environmental", "renewable_energy_percentage"),
    ("social", "board_diversity", "female_percentage"),
    ("social", "board_diversity", "minority_percentage"),
    ("social", "employee_satisfaction"),
    ("social", "pay_equity_ratio"),
    ("governance", "board_independence"),
    ("governance", "ethics_violations"),
    ("governance", "cybersecurity_incidents"),
)


def dotted(path: MetricPath) -> str:
    """Return the dotted form of a metric path."""
    return ".".join(path)


def get_path(doc: Mapping[str, Any], path: MetricPath) -> Any:
    """Walk `path` through nested mappings.

    Raises:
        KeyError: if any segment is missing or an intermediate value is not a mapping.
    """
    node: Any = doc
    for key in path:
        if not isinstance(node, Mapping) or key not in node:
            raise KeyError(dotted(path))
        node = node[key]
    return node


def set_path(doc: dict[str, Any], path: MetricPath, value: Any) -> None:
    """Assign `value` at `path`, creating intermediate dicts as needed."""
    node = doc
    for key in path[:-1]:
        node = node.setdefault(key, {})
    node[path[-1]] = value
