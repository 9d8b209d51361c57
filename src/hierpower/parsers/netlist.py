"""Structural Verilog netlist parser.

Reads the structural subset of Verilog produced by synthesis tools:

    module <name> ( <ports> ) ;
      input a ; output y ; wire n1 ;
      <type> <instance> ( .<pin>(<net>), ... ) ;
    endmodule

Each statement is normalized (comments and ``(* ... *)`` attributes removed,
continuation lines joined up to the ``;``), split into tokens and classified as
a module header, a port/net declaration, or an instance. Anything the parser
cannot classify is skipped.
"""

import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

from ..models.liberty import Cell
from ..models.netlist import Module, Netlist
from .base import BaseParser

logger = logging.getLogger(__name__)

# Statements starting with these keywords declare ports, nets or parameters
DECLARATION_KEYWORDS = frozenset(
    {
        "input",
        "output",
        "inout",
        "wire",
        "supply0",
        "supply1",
        "reg",
        "tri",
        "wand",
        "wor",
        "assign",
        "parameter",
        "localparam",
        "defparam",
        "genvar",
        "integer",
    }
)

_COMMENT_START = re.compile(r"//|/\*")
_ATTRIBUTE_INSTANCE = re.compile(r"\(\*.*?\*\)", re.DOTALL)
_ENDMODULE = re.compile(r"\bendmodule\b")
_ISOLATED = re.compile(r"([()#])")


class NetlistParser(BaseParser[Netlist]):
    """Line-oriented structural netlist parser.

    Args:
        cells: Cell table from the loaded libraries, used only to warn about
            instance types that are neither modules nor library cells. Pass
            None when no library was supplied to disable the warning.
        instance_mode: Record instances of known modules by instance name
            instead of counting them by type.
    """

    def __init__(self, cells: Optional[Mapping[str, Cell]] = None, instance_mode: bool = False):
        self._cells = cells
        self._instance_mode = instance_mode
        self._reset("unknown")

    def _reset(self, name: str) -> None:
        self._netlist = Netlist(name=name, instance_mode=self._instance_mode)
        self._current: Optional[Module] = None
        self._buffer = ""
        self._in_comment = False
        self._warned: set[str] = set()

    def parse(self, path: Path) -> Netlist:
        """Parses a netlist file from a given path.

        Args:
            path: Path to the Verilog netlist (.v or .v.gz).

        Returns:
            A populated Netlist object.
        """
        logger.info(f"Parsing netlist: {path}")
        content = self._read_file(path, encoding="utf-8", errors="replace")
        return self.parse_string(content, self._source_name(path))

    def parse_string(self, content: str, name: str = "unknown") -> Netlist:
        """Parses netlist content from a string.

        Args:
            content: The netlist text.
            name: Name recorded on the returned Netlist.

        Returns:
            A populated Netlist object.
        """
        logger.debug(f"Parsing netlist content, length: {len(content)}")
        self._reset(name)

        for line in content.splitlines():
            line = self._strip_comments(line)
            if line.lstrip().startswith("`"):
                # Compiler directive; it has no terminator to end the statement
                continue
            self._buffer += " " + _ENDMODULE.sub("endmodule;", line)
            while ";" in self._buffer:
                statement, self._buffer = self._buffer.split(";", 1)
                self._handle_statement(statement)

        if self._buffer.strip():
            self._handle_statement(self._buffer)
        self._buffer = ""

        netlist = self._netlist
        logger.info(
            f"Netlist {netlist.name}: {len(netlist.modules)} modules, "
            f"{len(netlist.unknown_types)} unknown cell types"
        )
        return netlist

    def _strip_comments(self, line: str) -> str:
        """Removes // and /* ... */ comments, carrying an open block comment forward."""
        kept = []
        pos = 0
        while pos < len(line):
            if self._in_comment:
                end = line.find("*/", pos)
                if end < 0:
                    break
                pos = end + 2
                self._in_comment = False
                continue

            match = _COMMENT_START.search(line, pos)
            if not match:
                kept.append(line[pos:])
                break
            kept.append(line[pos : match.start()])
            if match.group() == "//":
                break
            self._in_comment = True
            pos = match.end()
        return " ".join(kept)

    def _handle_statement(self, statement: str) -> None:
        # Attributes may span lines, so they are removed from the joined statement
        statement = _ATTRIBUTE_INSTANCE.sub(" ", statement)
        tokens = _ISOLATED.sub(r" \1 ", statement).split()
        if not tokens:
            return

        head = tokens[0]
        if head in DECLARATION_KEYWORDS:
            return
        if head in ("module", "macromodule"):
            if len(tokens) > 1:
                self._current = self._netlist.get_or_create(tokens[1])
            return
        if head == "endmodule":
            self._current = None
            return
        if self._current is None:
            return

        instance_name = self._instance_name(tokens)
        if instance_name is None:
            return
        self._record_instance(head, instance_name)

    @staticmethod
    def _instance_name(tokens: list[str]) -> Optional[str]:
        """Returns the instance name of an instance statement.

        Skips a ``#( ... )`` parameter override or ``#<delay>`` between the type
        and the instance name.
        """
        pos = 1
        if pos < len(tokens) and tokens[pos] == "#":
            pos += 1
            if pos < len(tokens) and tokens[pos] == "(":
                level = 0
                while pos < len(tokens):
                    if tokens[pos] == "(":
                        level += 1
                    elif tokens[pos] == ")":
                        level -= 1
                        if level == 0:
                            break
                    pos += 1
            pos += 1

        if pos >= len(tokens) or tokens[pos] in ("(", ")"):
            return None
        return tokens[pos]

    def _record_instance(self, type_name: str, instance_name: str) -> None:
        module = self._current
        is_module = self._netlist.is_module(type_name)

        if self._instance_mode and is_module:
            module.add_instance(instance_name, type_name)
        else:
            module.add_occurrence(type_name)

        if (
            self._cells is not None
            and not is_module
            and type_name not in self._cells
            and type_name not in self._warned
        ):
            self._warned.add(type_name)
            self._netlist.unknown_types.append(type_name)
            logger.warning(
                f"Cell type '{type_name}' (instance {instance_name} in {module.name}) "
                f"is not a module and not found in any library"
            )
