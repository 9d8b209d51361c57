"""Liberty (.lib) characterization data models.

This module defines the Pydantic models for the subset of the Liberty format that
hierarchy reporting consumes: per-cell area and resolved leakage power, grouped
by the library file that defined them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

# Sentinel used for leakage groups without a `when` or `related_pg_pin` attribute
UNCONDITIONAL = "--"


class LeakageMethod(str, Enum):
    """How a cell's leakage power was resolved.

    Tiers are listed in priority order; the first one that applies wins.
    """

    DIRECT = "direct"  # cell_leakage_power attribute
    NO_WHEN = "no-when"  # leakage_power group without a `when` condition
    AVERAGE = "average"  # mean of conditional leakage_power groups
    DEFAULT = "default"  # library default_leakage_power


@dataclass
class LeakageGroup:
    """A single `leakage_power () { ... }` group inside a cell.

    Only lives while its block is open; on close its value is folded into the
    cell's per-condition accumulator.
    """

    value: float = 0.0
    when: str = UNCONDITIONAL
    related_pg_pin: str = UNCONDITIONAL


class Cell(BaseModel):
    """Represents a characterized leaf cell.

    Attributes:
        name: The cell name.
        area: Cell area in library units (0.0 when undefined).
        leakage_power: Resolved leakage power, already scaled by the library's
            `leakage_power_unit` multiplier.
        leakage_method: Which resolution tier produced `leakage_power`.
        source_library: Name of the library that defined this cell.
    """

    name: str
    area: float = 0.0
    leakage_power: float = 0.0
    leakage_method: LeakageMethod = LeakageMethod.DEFAULT
    source_library: Optional[str] = None

    model_config = {"frozen": True}


class LibertyLibrary(BaseModel):
    """Cells and unit information read from a single Liberty file.

    Attributes:
        name: Library name from the `library (...)` header, or the file stem.
        source: Path of the file the library was read from, if any.
        leakage_unit_multiplier: Numeric part of `leakage_power_unit`.
        leakage_unit_label: Unit part of `leakage_power_unit` (e.g. "nW").
        default_leakage_power: Raw `default_leakage_power` value.
        cells: Cells keyed by name, in definition order.
    """

    name: str
    source: Optional[str] = None
    leakage_unit_multiplier: float = 1.0
    leakage_unit_label: str = ""
    default_leakage_power: float = 0.0
    cells: dict[str, Cell] = Field(default_factory=dict)

    @property
    def leakage_power_unit(self) -> str:
        """The `leakage_power_unit` as written, e.g. "1nW"."""
        if not self.leakage_unit_label:
            return ""
        return f"{self.leakage_unit_multiplier:g}{self.leakage_unit_label}"

    def method_counts(self) -> dict[str, int]:
        """Returns the number of cells resolved by each leakage method."""
        counts = {method.value: 0 for method in LeakageMethod}
        for cell in self.cells.values():
            counts[cell.leakage_method.value] += 1
        return counts
