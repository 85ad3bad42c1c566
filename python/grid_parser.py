"""
Grid parsing utilities for gridsearch.

Builds Grid values from line-oriented puzzle text. Each character of a
line is one cell; a converter turns the character into the cell value.
"""

from __future__ import annotations

import textwrap
from typing import Callable, Iterable, TypeVar

from grid_types import Grid, MalformedGrid

__all__ = ["parse_grid", "parse_characters", "parse_integers", "parse_booleans"]

T = TypeVar("T")


def _split_lines(definition: str | Iterable[str]) -> list[str]:
    """
    Normalise input to non-blank lines.

    A string has its common indentation removed; spaces beyond that are
    cells. Lines from an iterable lose only their line terminator.
    """
    if isinstance(definition, str):
        raw_lines = textwrap.dedent(definition).splitlines()
    else:
        raw_lines = [line.rstrip("\r\n") for line in definition]
    return [line for line in raw_lines if line.strip()]


def parse_grid(definition: str | Iterable[str], converter: Callable[[str], T]) -> Grid[T]:
    """
    Parse a grid where each character is converted into one cell.

    Format:
    - One row per line (a multi-line string or an iterable of lines)
    - Common indentation and blank lines are ignored; other spaces are cells
    - Every row must have the same number of characters

    Example:
        \"\"\"
        #..
        .#.
        \"\"\"
        with converter=str creates a 2x3 grid of single characters.

    Args:
        definition: Multi-line string or iterable of lines
        converter: Function turning one character into a cell value

    Returns:
        The parsed Grid

    Raises:
        MalformedGrid: If there are no rows or rows differ in length
        ValueError: If the converter rejects a character
    """
    lines = _split_lines(definition)
    if not lines:
        raise MalformedGrid("Input cannot be empty: no grid rows found")

    cols = len(lines[0])
    mismatched = [(i, len(line)) for i, line in enumerate(lines) if len(line) != cols]
    if mismatched:
        error_msg = (
            f"Inconsistent row lengths in grid input\n"
            f"  Expected: {cols} columns (from row 0)\n"
            f"  Mismatched rows:\n"
        )
        for row_idx, actual_cols in mismatched:
            error_msg += f"    Row {row_idx}: {actual_cols} columns - \"{lines[row_idx]}\"\n"
        error_msg += "  All rows must have the same number of cells"
        raise MalformedGrid(error_msg)

    rows: list[tuple[T, ...]] = []
    for row_idx, line in enumerate(lines):
        cells: list[T] = []
        for col_idx, char in enumerate(line):
            try:
                cells.append(converter(char))
            except ValueError as e:
                raise ValueError(
                    f"Invalid character '{char}' in grid input\n"
                    f"  Row {row_idx}, column {col_idx}: \"{line}\"\n"
                    f"  {e}"
                ) from e
        rows.append(tuple(cells))

    return Grid(tuple(rows))


def parse_characters(definition: str | Iterable[str]) -> Grid[str]:
    """Parse a grid of single characters."""
    return parse_grid(definition, str)


def parse_integers(definition: str | Iterable[str]) -> Grid[int]:
    """
    Parse a grid of single digits, e.g. a height map.

    Raises:
        ValueError: If any character is not a digit
    """

    def to_digit(char: str) -> int:
        if not char.isdigit():
            raise ValueError("Valid characters: digits (0-9)")
        return int(char)

    return parse_grid(definition, to_digit)


def parse_booleans(definition: str | Iterable[str], true_char: str = "#") -> Grid[bool]:
    """Parse a grid where `true_char` is True and any other character is False."""
    return parse_grid(definition, lambda char: char == true_char)
