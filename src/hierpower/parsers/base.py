"""Base parser module with shared file reading and value coercion.

Provides the abstract base class for the line-oriented Liberty and netlist
parsers, along with the lenient scalar helpers both of them rely on.
"""

import gzip
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Generic, TypeVar

T = TypeVar("T")


def strip_value(value: Any) -> str:
    """Strips whitespace, a trailing semicolon and one level of quotes.

    Args:
        value: Raw attribute text, e.g. ``' "1.25" ;'``.

    Returns:
        The bare value text, e.g. ``"1.25"``. None becomes an empty string.
    """
    if value is None:
        return ""
    text = str(value).strip().rstrip(";").strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        text = text[1:-1].strip()
    return text


def parse_float(value: Any, default: float = 0.0) -> float:
    """Parses a scalar attribute as a float, falling back to a default.

    Characterization data is machine-generated and read best-effort, so a
    malformed number never aborts a run.

    Args:
        value: Raw attribute text (quotes and whitespace allowed).
        default: Value returned when the text is not a number.

    Returns:
        The parsed float, or `default`.
    """
    try:
        return float(strip_value(value))
    except (ValueError, TypeError):
        return default


class BaseParser(ABC, Generic[T]):
    """Abstract base class for the technology and netlist parsers.

    Both concrete parsers are line oriented: `parse` reads the whole file
    (decompressing `.gz` transparently) and hands the text to `parse_string`.

    Attributes:
        Generic[T]: The type of the model returned by the parser.
    """

    def _read_file(self, path: Path, encoding: str = "utf-8", errors: str = "strict") -> str:
        """Reads file content, automatically handling .gz compression.

        Args:
            path: Path to the file.
            encoding: Text encoding (default: utf-8).
            errors: Error handling scheme for encoding errors (default: strict).

        Returns:
            The content of the file as a string.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        if path.suffix == ".gz":
            with gzip.open(path, mode="rt", encoding=encoding, errors=errors) as f:
                return f.read()
        return path.read_text(encoding=encoding, errors=errors)

    @staticmethod
    def _source_name(path: Path) -> str:
        """Returns the file name without any extensions (``a.lib.gz`` -> ``a``)."""
        return path.name.split(".")[0]

    @abstractmethod
    def parse(self, path: Path) -> T:
        """Parses a file from a given path.

        Args:
            path: Path to the input file.

        Returns:
            The parsed data model.
        """
        ...

    @abstractmethod
    def parse_string(self, content: str, name: str = "unknown") -> T:
        """Parses content held in a string.

        Args:
            content: The raw content string.
            name: Optional name for the parsed object.

        Returns:
            The parsed data model.
        """
        ...
