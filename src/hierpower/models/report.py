"""Hierarchy report data models.

Defines the configuration consumed by the aggregator, the per-occurrence report
rows it emits, and the aggregate metric triple rolled up through the hierarchy.
"""

from dataclasses import dataclass
from typing import Iterator, Optional

import pandas as pd
from pydantic import BaseModel, Field

# Label widths of the first report column
LABEL_WIDTH_WITH_LIBRARY = 50
LABEL_WIDTH_COUNT_ONLY = 70

# Marker repeated once per hierarchy level in front of each label
INDENT_MARKER = "."


def label_width(has_library: bool) -> int:
    """Returns the width of the label column for a report with or without a library."""
    return LABEL_WIDTH_WITH_LIBRARY if has_library else LABEL_WIDTH_COUNT_ONLY


@dataclass(frozen=True)
class AggregateMetric:
    """Instance count, leakage power and area of a (sub)tree.

    Attributes:
        instance_count: Number of leaf cell instances in the flattened subtree.
        power: Total leakage power of those leaves.
        area: Total area of those leaves.
    """

    instance_count: int = 0
    power: float = 0.0
    area: float = 0.0

    def __add__(self, other: "AggregateMetric") -> "AggregateMetric":
        return AggregateMetric(
            self.instance_count + other.instance_count,
            self.power + other.power,
            self.area + other.area,
        )

    def __mul__(self, multiplicity: int) -> "AggregateMetric":
        return AggregateMetric(
            self.instance_count * multiplicity,
            self.power * multiplicity,
            self.area * multiplicity,
        )


class ReportConfig(BaseModel):
    """Options that shape the hierarchy report.

    Attributes:
        area_scale: Factor applied to the area column.
        power_scale: Factor applied to the leakage power column.
        max_depth: Deepest hierarchy level that gets a row (root is 0).
            None means unbounded.
        instance_mode: Report module instances by instance name instead of
            aggregating them by module type.
    """

    area_scale: float = Field(default=1.0, allow_inf_nan=False)
    power_scale: float = Field(default=1.0, allow_inf_nan=False)
    max_depth: Optional[int] = Field(default=None, ge=0)
    instance_mode: bool = False

    def includes_depth(self, depth: int) -> bool:
        """Returns True if rows at `depth` should be reported."""
        return self.max_depth is None or depth <= self.max_depth


class ReportRow(BaseModel):
    """One module (or module instance) occurrence in the hierarchy.

    Attributes:
        label: Indented, width-truncated display label.
        name: Module or instance name, untruncated.
        depth: Hierarchy level (root is 0).
        instance_count: Leaf cells below this occurrence.
        area: Scaled area, or None when no library was loaded.
        power: Scaled leakage power, or None when no library was loaded.
    """

    label: str
    name: str
    depth: int
    instance_count: int
    area: Optional[float] = None
    power: Optional[float] = None


class Report(BaseModel):
    """Rows produced by one aggregation run.

    `rows` is kept in emission order: children are appended before their parent,
    so the root row is last. Use `display_rows` for root-first order.
    """

    top: str
    has_library: bool = False
    power_unit: str = ""
    rows: list[ReportRow] = Field(default_factory=list)
    total: AggregateMetric = Field(default_factory=AggregateMetric)

    @property
    def label_width(self) -> int:
        return label_width(self.has_library)

    @property
    def display_rows(self) -> Iterator[ReportRow]:
        """Rows in display order (root first)."""
        return reversed(self.rows)

    def to_dataframe(self) -> pd.DataFrame:
        """Converts the report to a Pandas DataFrame in display order.

        Returns:
            A DataFrame with columns name, depth, instance_count and, when a
            library was loaded, area and power.
        """
        columns = ["name", "depth", "instance_count"]
        if self.has_library:
            columns += ["area", "power"]
        records = [row.model_dump(include=set(columns)) for row in self.display_rows]
        return pd.DataFrame.from_records(records, columns=columns)
