"""Hierarchy aggregation.

Rolls leaf cell area and leakage power up through the module hierarchy and
collects one report row per module occurrence.

Cost model: results are not memoized. A module instantiated from
several parents is walked again under each of them and gets a row under each,
so the work done is proportional to the flattened instance tree rather than to
the number of distinct modules. Within one parent, repeated occurrences of the
same type are walked once and multiplied by their count.
"""

import logging
from collections.abc import Mapping
from typing import Optional

from .exceptions import HierarchyCycleError, UnknownModuleError
from .models.liberty import Cell
from .models.netlist import Netlist
from .models.report import (
    INDENT_MARKER,
    AggregateMetric,
    Report,
    ReportConfig,
    ReportRow,
    label_width,
)

logger = logging.getLogger(__name__)


class HierarchyAggregator:
    """Computes bottom-up (count, power, area) totals for a netlist.

    Args:
        netlist: Module table from the netlist parser.
        cells: Merged cell table from the loaded libraries, or None when no
            library was supplied (area and power columns are then omitted).
        config: Report options. Defaults to an unbounded count-mode report.
        power_unit: Leakage unit label shown in the report header.
    """

    def __init__(
        self,
        netlist: Netlist,
        cells: Optional[Mapping[str, Cell]] = None,
        config: Optional[ReportConfig] = None,
        power_unit: str = "",
    ):
        self.netlist = netlist
        self.cells = cells
        self.config = config or ReportConfig()
        self.power_unit = power_unit
        self._rows: list[ReportRow] = []
        self._path: list[str] = []

    @property
    def has_library(self) -> bool:
        return self.cells is not None

    @property
    def rows(self) -> list[ReportRow]:
        """Rows collected so far, in emission (post-order) order."""
        return self._rows

    def build_report(self, top: str) -> Report:
        """Aggregates the hierarchy below `top` into a fresh Report.

        Args:
            top: Name of the root module.

        Returns:
            The Report with rows in emission order and the root totals.

        Raises:
            UnknownModuleError: If `top` is not a module of the netlist.
            HierarchyCycleError: If a module instantiates itself.
        """
        if not self.netlist.is_module(top):
            raise UnknownModuleError(top, list(self.netlist.modules))

        self._rows = []
        self._path = []
        total = self.aggregate(top)
        logger.info(
            f"Aggregated {top}: {total.instance_count} leaf instances, {len(self._rows)} rows"
        )
        return Report(
            top=top,
            has_library=self.has_library,
            power_unit=self.power_unit,
            rows=list(self._rows),
            total=total,
        )

    def aggregate(self, name: str, depth: int = 0, instance: Optional[str] = None) -> AggregateMetric:
        """Returns the rolled-up metric of `name`, appending rows as a side effect.

        Args:
            name: A module name, or a leaf cell type.
            depth: Hierarchy level of this occurrence (root is 0).
            instance: Instance name of this occurrence, used as the row label
                in instance mode.

        Returns:
            The (instance count, power, area) triple of one occurrence.
        """
        if not self.netlist.is_module(name):
            return self._leaf_metric(name)

        if name in self._path:
            raise HierarchyCycleError(self._path[self._path.index(name) :] + [name])

        module = self.netlist.modules[name]
        total = AggregateMetric()
        self._path.append(name)
        try:
            if self.config.instance_mode:
                for instance_name, type_name in module.instances.items():
                    total = total + self.aggregate(type_name, depth + 1, instance_name)
            for type_name, count in module.counts.items():
                total = total + self.aggregate(type_name, depth + 1) * count
        finally:
            self._path.pop()

        if self.config.includes_depth(depth):
            label_name = instance if (instance and self.config.instance_mode) else name
            self._rows.append(self._make_row(label_name, depth, total))
        return total

    def _leaf_metric(self, name: str) -> AggregateMetric:
        cell = self.cells.get(name) if self.cells else None
        if cell is None:
            return AggregateMetric(instance_count=1)
        return AggregateMetric(instance_count=1, power=cell.leakage_power, area=cell.area)

    def _make_row(self, name: str, depth: int, metric: AggregateMetric) -> ReportRow:
        label = (INDENT_MARKER * depth + name)[: label_width(self.has_library)]
        if not self.has_library:
            return ReportRow(label=label, name=name, depth=depth, instance_count=metric.instance_count)
        return ReportRow(
            label=label,
            name=name,
            depth=depth,
            instance_count=metric.instance_count,
            area=metric.area * self.config.area_scale,
            power=metric.power * self.config.power_scale,
        )
