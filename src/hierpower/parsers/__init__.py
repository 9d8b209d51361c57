"""Parsers for characterization libraries and structural netlists"""

from .base import BaseParser, parse_float, strip_value
from .liberty import LibertyParser
from .netlist import NetlistParser

__all__ = [
    "BaseParser",
    "LibertyParser",
    "NetlistParser",
    "parse_float",
    "strip_value",
]
