"""Liberty (.lib) area and leakage loader.

Liberty is a hierarchical attribute/group format. Hierarchy reporting only needs
two numbers per cell, so instead of building a full syntax tree this parser walks
the file line by line and tracks the open groups on an explicit stack:

- depth 0: ``library (name) {``
- depth 1: ``leakage_power_unit``, ``default_leakage_power``, ``cell (name) {``
- depth 2: ``area``, ``cell_leakage_power``, ``leakage_power () {``
- depth 3: ``value``, ``when``, ``related_pg_pin`` of a leakage group

Everything else is skipped. Leakage power is resolved when a cell closes, in
this priority order: ``cell_leakage_power``, the unconditional leakage group,
the mean of the conditional groups, and finally ``default_leakage_power``.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np

from ..models.liberty import UNCONDITIONAL, Cell, LeakageGroup, LeakageMethod, LibertyLibrary
from .base import BaseParser, parse_float, strip_value

logger = logging.getLogger(__name__)

# Quoted strings, escaped characters, structural punctuation, or plain text runs
_PIECE = re.compile(r'"(?:[^"\\]|\\.)*"?|\\.|[{};]|[^{};"\\]+')

# Group header at the end of the pending text: name ( args )
_GROUP_HEADER = re.compile(r"(\w+)\s*\(([^()]*)\)\s*$", re.DOTALL)

# Simple attribute: name : value
_ATTRIBUTE = re.compile(r"^\s*(\w+)\s*:\s*(.*?)\s*$", re.DOTALL)

# leakage_power_unit value: number immediately followed by a unit label
_UNIT = re.compile(r"^([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*([A-Za-z]*)$")

_BLOCK_COMMENT = re.compile(r"/\*.*?\*/")

# A complete double-quoted string
_QUOTED = re.compile(r'"(?:[^"\\]|\\.)*"')

# Rest of a string continued from the previous line, up to its closing quote
_STRING_TAIL = re.compile(r'(?:[^"\\]|\\.)*"')


@dataclass(frozen=True)
class BlockFrame:
    """An open ``{ ... }`` group.

    Attributes:
        keyword: Group keyword from the header (e.g. "cell"), empty if unnamed.
        depth: Nesting depth inside this group (the library body is depth 1).
    """

    keyword: str
    depth: int


def parse_leakage_unit(value: str) -> tuple[float, str]:
    """Parses a ``leakage_power_unit`` value such as ``"1nW"`` or ``"10 pW"``.

    Returns:
        A (multiplier, unit label) tuple. Text without a leading number yields
        a multiplier of 1.0 and the whole text as the label.
    """
    text = strip_value(value)
    match = _UNIT.match(text)
    if not match:
        return (1.0, text)
    return (float(match.group(1)), match.group(2))


class LibertyParser(BaseParser[LibertyLibrary]):
    """Line-oriented Liberty parser extracting cell area and leakage power.

    The parser is lenient: unknown groups and attributes, malformed numbers and
    unbalanced braces are skipped rather than reported. A parser instance can be
    reused; all per-file state is reset at the start of `parse_string`.
    """

    def __init__(self):
        self._reset("unknown")

    def _reset(self, name: str) -> None:
        self._library = LibertyLibrary(name=name)
        self._stack: list[BlockFrame] = []
        self._pending = ""
        self._in_comment = False
        self._in_string = False

        # Current cell context
        self._cell_name: Optional[str] = None
        self._area = 0.0
        self._direct_leakage: Optional[float] = None
        self._accumulator: dict[str, float] = {}
        self._group: Optional[LeakageGroup] = None

    @property
    def depth(self) -> int:
        """Number of currently open groups."""
        return len(self._stack)

    def parse(self, path: Path) -> LibertyLibrary:
        """Parses a Liberty file from a given path.

        Args:
            path: Path to the Liberty file (.lib or .lib.gz).

        Returns:
            A populated LibertyLibrary object.
        """
        logger.info(f"Parsing Liberty file: {path}")
        content = self._read_file(path, encoding="utf-8", errors="replace")
        library = self.parse_string(content, self._source_name(path))
        library.source = str(path)
        return library

    def parse_string(self, content: str, name: str = "unknown") -> LibertyLibrary:
        """Parses Liberty content from a string.

        Args:
            content: The Liberty file content.
            name: Fallback library name when the content has no library header.

        Returns:
            A populated LibertyLibrary object.
        """
        logger.debug(f"Parsing Liberty content, length: {len(content)}")
        self._reset(name)

        for line in content.splitlines():
            self._process_line(self._strip_comments(line))

        library = self._library
        logger.info(
            f"Library {library.name}: {len(library.cells)} cells, "
            f"leakage unit {library.leakage_power_unit or 'unspecified'}"
        )
        return library

    def _strip_comments(self, line: str) -> str:
        """Removes /* ... */ comments, carrying an unterminated one to later lines."""
        if self._in_comment:
            end = line.find("*/")
            if end < 0:
                return ""
            line = line[end + 2 :]
            self._in_comment = False

        line = _BLOCK_COMMENT.sub(" ", line)
        start = line.find("/*")
        if start >= 0:
            line = line[:start]
            self._in_comment = True
        return line

    def _process_line(self, line: str) -> None:
        if self._in_string:
            tail = _STRING_TAIL.match(line)
            if tail is None:
                self._pending += line.rstrip().rstrip("\\") + " "
                return
            self._pending += tail.group()
            line = line[tail.end() :]
            self._in_string = False

        for piece in _PIECE.findall(line):
            if piece.startswith('"'):
                self._pending += piece
                # Only the last piece of a line can be an unterminated string
                self._in_string = not _QUOTED.fullmatch(piece)
            elif piece == ";":
                self._handle_statement(self._pending)
                self._pending = ""
            elif piece == "{":
                self._open_block(self._pending)
                self._pending = ""
            elif piece == "}":
                if self._pending.strip():
                    self._handle_statement(self._pending)
                self._pending = ""
                self._close_block()
            else:
                self._pending += piece

        # Attributes missing their semicolon end at the line break; anything else
        # (group headers, open strings, backslash-continued values) carries over.
        if self._in_string or line.rstrip().endswith("\\"):
            self._pending += " "
        elif _ATTRIBUTE.match(self._pending):
            self._handle_statement(self._pending)
            self._pending = ""
        elif self._pending.strip():
            self._pending += " "
        else:
            self._pending = ""

    def _open_block(self, header: str) -> None:
        match = _GROUP_HEADER.search(header)
        keyword = match.group(1) if match else ""
        arg = strip_value(match.group(2)) if match else ""
        parent = self._stack[-1].keyword if self._stack else None

        if self.depth == 0 and keyword == "library":
            if arg:
                self._library.name = arg
        elif self.depth == 1 and keyword == "cell":
            self._begin_cell(arg)
        elif self.depth == 2 and keyword == "leakage_power" and parent == "cell":
            self._group = LeakageGroup()

        self._stack.append(BlockFrame(keyword=keyword, depth=self.depth + 1))

    def _close_block(self) -> None:
        if not self._stack:
            return
        frame = self._stack.pop()

        if frame.keyword == "leakage_power" and self.depth == 2 and self._group is not None:
            group = self._group
            self._accumulator[group.when] = self._accumulator.get(group.when, 0.0) + group.value
            self._group = None
        elif frame.keyword == "cell" and self.depth == 1 and self._cell_name is not None:
            self._finish_cell()

    def _handle_statement(self, text: str) -> None:
        match = _ATTRIBUTE.match(text)
        if not match or not self._stack:
            return
        attr, value = match.group(1), match.group(2)
        frame = self._stack[-1]

        if self.depth == 1:
            if attr == "leakage_power_unit":
                multiplier, label = parse_leakage_unit(value)
                self._library.leakage_unit_multiplier = multiplier
                self._library.leakage_unit_label = label
            elif attr == "default_leakage_power":
                self._library.default_leakage_power = parse_float(value)
        elif self.depth == 2 and frame.keyword == "cell" and self._cell_name is not None:
            if attr == "cell_leakage_power":
                self._direct_leakage = parse_float(value)
            elif attr == "area":
                self._area = parse_float(value)
        elif self.depth == 3 and self._group is not None:
            if attr == "value":
                self._group.value = parse_float(value)
            elif attr == "when":
                self._group.when = strip_value(value)
            elif attr == "related_pg_pin":
                self._group.related_pg_pin = strip_value(value)

    def _begin_cell(self, name: str) -> None:
        self._cell_name = name
        self._area = 0.0
        self._direct_leakage = None
        self._accumulator = {}
        self._group = None

    def _finish_cell(self) -> None:
        leakage, method = self._resolve_leakage()
        cell = Cell(
            name=self._cell_name,
            area=self._area,
            leakage_power=leakage,
            leakage_method=method,
            source_library=self._library.name,
        )
        self._library.cells[cell.name] = cell
        logger.debug(f"Cell {cell.name}: area={cell.area:g} leakage={leakage:g} ({method.value})")
        self._cell_name = None

    def _resolve_leakage(self) -> tuple[float, LeakageMethod]:
        """Picks the leakage value for the cell that is closing.

        Every value is scaled by the file's unit multiplier exactly once here;
        group values are accumulated unscaled.
        """
        multiplier = self._library.leakage_unit_multiplier

        if self._direct_leakage is not None:
            return (self._direct_leakage * multiplier, LeakageMethod.DIRECT)

        if UNCONDITIONAL in self._accumulator:
            return (self._accumulator[UNCONDITIONAL] * multiplier, LeakageMethod.NO_WHEN)

        if self._accumulator:
            mean = float(np.mean(list(self._accumulator.values())))
            return (mean * multiplier, LeakageMethod.AVERAGE)

        return (self._library.default_leakage_power * multiplier, LeakageMethod.DEFAULT)
