"""Structural netlist data models.

A netlist is reduced to what hierarchy reporting needs: for each module, which
types it instantiates and how often (count mode), or which named instances of
sub-modules it contains (instance mode).
"""

from pydantic import BaseModel, Field


class Module(BaseModel):
    """A module definition and the instance records it encloses.

    Attributes:
        name: The module name from its `module <name>` header.
        instances: Instance name to module type, filled only in instance mode
            and only for types that are known modules.
        counts: Type name to number of occurrences within this module.
    """

    name: str
    instances: dict[str, str] = Field(default_factory=dict)
    counts: dict[str, int] = Field(default_factory=dict)

    def add_instance(self, instance_name: str, type_name: str) -> None:
        self.instances[instance_name] = type_name

    def add_occurrence(self, type_name: str) -> None:
        self.counts[type_name] = self.counts.get(type_name, 0) + 1

    @property
    def num_children(self) -> int:
        """Number of direct child instances recorded for this module."""
        return len(self.instances) + sum(self.counts.values())


class Netlist(BaseModel):
    """Module table produced by the netlist parser.

    Attributes:
        name: Name of the parsed file or string.
        instance_mode: Whether module-typed instances were recorded by identity.
        modules: Module name to Module, in definition order.
        unknown_types: Type names that matched neither a module nor a library
            cell, in the order they were first seen.
    """

    name: str = "unknown"
    instance_mode: bool = False
    modules: dict[str, Module] = Field(default_factory=dict)
    unknown_types: list[str] = Field(default_factory=list)

    def is_module(self, name: str) -> bool:
        """Returns True if `name` was declared with a `module` header."""
        return name in self.modules

    def get_or_create(self, name: str) -> Module:
        if name not in self.modules:
            self.modules[name] = Module(name=name)
        return self.modules[name]

    def top_candidates(self) -> list[str]:
        """Returns modules that no other module instantiates.

        These are the natural roots for a report when the caller does not know
        the top module name.
        """
        used = set()
        for module in self.modules.values():
            used.update(module.instances.values())
            used.update(module.counts.keys())
        return [name for name in self.modules if name not in used]
