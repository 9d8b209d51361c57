"""Design context: the tables shared by loading, parsing and aggregation.

A DesignContext owns the merged cell table, the per-file libraries it was
built from, and the parsed netlist. Each phase completes before the next one
starts: load every library, then parse the netlist, then build reports.

Example:
    >>> from hierpower.context import DesignContext
    >>> ctx = DesignContext()
    >>> ctx.load_libraries(["stdcells.lib", "macros.lib.gz"]).load_netlist("top.v")
    >>> report = ctx.build_report("top", ReportConfig(max_depth=2))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .hierarchy import HierarchyAggregator
from .models.liberty import Cell, LibertyLibrary
from .models.netlist import Netlist
from .models.report import Report, ReportConfig
from .parsers.liberty import LibertyParser
from .parsers.netlist import NetlistParser

logger = logging.getLogger(__name__)


class DesignContext:
    """Cell and module tables for one reporting run.

    Attributes:
        libraries: Libraries in the order they were loaded.
        cells: Merged cell table; a later library replaces earlier entries.
        netlist: The parsed netlist, once `load_netlist` has run.
    """

    def __init__(self) -> None:
        self.libraries: list[LibertyLibrary] = []
        self.cells: dict[str, Cell] = {}
        self.netlist: Optional[Netlist] = None
        self._parser = LibertyParser()

    @property
    def has_library(self) -> bool:
        """True once at least one library has been loaded."""
        return bool(self.libraries)

    @property
    def power_unit(self) -> str:
        """Leakage unit label of the most recently loaded library that declares one."""
        for library in reversed(self.libraries):
            if library.leakage_unit_label:
                return library.leakage_unit_label
        return ""

    def load_libraries(self, paths: list[Path | str]) -> DesignContext:
        """Load Liberty files in order.

        Args:
            paths: Liberty file paths (.lib or .lib.gz).

        Returns:
            self, for method chaining.

        Raises:
            FileNotFoundError: If a file does not exist.
        """
        for p in paths:
            self.add_library(self._parser.parse(Path(p)))
        return self

    def add_library(self, library: LibertyLibrary) -> DesignContext:
        """Merge an already parsed library into the cell table.

        Cells already present are replaced wholesale by the new definition.

        Returns:
            self, for method chaining.
        """
        labels = {lib.leakage_unit_label for lib in self.libraries if lib.leakage_unit_label}
        if library.leakage_unit_label and labels and library.leakage_unit_label not in labels:
            logger.warning(
                f"Library {library.name} uses leakage unit {library.leakage_power_unit}, "
                f"previous libraries use {', '.join(sorted(labels))}; "
                f"the report is labeled {library.leakage_unit_label}"
            )

        for name, cell in library.cells.items():
            previous = self.cells.get(name)
            if previous is not None:
                logger.debug(
                    f"Cell {name} from {library.name} replaces definition from "
                    f"{previous.source_library}"
                )
            self.cells[name] = cell

        self.libraries.append(library)
        return self

    def load_netlist(self, path: Path | str, instance_mode: bool = False) -> DesignContext:
        """Parse the netlist against the cells loaded so far.

        Args:
            path: Verilog netlist path (.v or .v.gz).
            instance_mode: Record module instances by instance name.

        Returns:
            self, for method chaining.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        self.netlist = self._netlist_parser(instance_mode).parse(Path(path))
        return self

    def load_netlist_string(
        self, content: str, name: str = "unknown", instance_mode: bool = False
    ) -> DesignContext:
        """Parse netlist text against the cells loaded so far.

        Returns:
            self, for method chaining.
        """
        self.netlist = self._netlist_parser(instance_mode).parse_string(content, name)
        return self

    def _netlist_parser(self, instance_mode: bool) -> NetlistParser:
        cells = self.cells if self.has_library else None
        return NetlistParser(cells=cells, instance_mode=instance_mode)

    def aggregator(self, config: Optional[ReportConfig] = None) -> HierarchyAggregator:
        """Returns an aggregator over the loaded tables.

        Raises:
            RuntimeError: If no netlist has been loaded.
            ValueError: If `config.instance_mode` differs from the mode the
                netlist was parsed in.
        """
        if self.netlist is None:
            raise RuntimeError("No netlist loaded; call load_netlist() first")
        config = config or ReportConfig(instance_mode=self.netlist.instance_mode)
        if config.instance_mode != self.netlist.instance_mode:
            raise ValueError(
                f"Report instance_mode={config.instance_mode} but the netlist was parsed "
                f"with instance_mode={self.netlist.instance_mode}"
            )
        return HierarchyAggregator(
            self.netlist,
            cells=self.cells if self.has_library else None,
            config=config,
            power_unit=self.power_unit,
        )

    def build_report(self, top: str, config: Optional[ReportConfig] = None) -> Report:
        """Aggregate the hierarchy below `top`.

        Args:
            top: Root module name.
            config: Report options; defaults to the netlist's instance mode
                with no depth limit and unit scale factors.

        Returns:
            The Report for `top`.
        """
        return self.aggregator(config).build_report(top)
