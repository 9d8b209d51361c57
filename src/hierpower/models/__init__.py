"""Data models for hierarchy reporting"""

from .liberty import UNCONDITIONAL, Cell, LeakageGroup, LeakageMethod, LibertyLibrary
from .netlist import Module, Netlist
from .report import AggregateMetric, Report, ReportConfig, ReportRow

__all__ = [
    "UNCONDITIONAL",
    "Cell",
    "LeakageGroup",
    "LeakageMethod",
    "LibertyLibrary",
    "Module",
    "Netlist",
    "AggregateMetric",
    "Report",
    "ReportConfig",
    "ReportRow",
]
