"""HierPower Exceptions.

This module defines custom exceptions raised while building hierarchy reports.
"""

from typing import Optional


class HierPowerError(Exception):
    """Base class for all HierPower errors."""


class UnknownModuleError(HierPowerError):
    """Raised when a report is requested for a name that is not a defined module.

    Attributes:
        name: The requested top-level module name.
    """

    def __init__(self, name: str, known: Optional[list[str]] = None):
        self.name = name
        self.known = known or []
        msg = f"Module '{name}' is not defined in the netlist"
        if self.known:
            msg += f" (defined modules: {', '.join(sorted(self.known)[:10])}"
            if len(self.known) > 10:
                msg += ", ..."
            msg += ")"
        super().__init__(msg)


class HierarchyCycleError(HierPowerError):
    """Raised when a module instantiates itself, directly or transitively.

    Attributes:
        path: Module names from the first occurrence of the repeated module
            down to its re-entry, e.g. ``["A", "B", "A"]``.
    """

    def __init__(self, path: list[str]):
        self.path = path
        super().__init__(f"Cyclic module hierarchy: {' -> '.join(path)}")
