"""Tests for grid_parser module."""

import pytest

from grid_parser import parse_booleans, parse_characters, parse_grid, parse_integers
from grid_types import Coordinate, MalformedGrid


class TestParseCharacters:
    """Tests for the character grid parser."""

    def test_simple_grid(self) -> None:
        """Parse a small grid of characters."""
        definition = """
        #..
        .#.
        """
        grid = parse_characters(definition)

        assert grid.rows == 2
        assert grid.cols == 3
        assert grid.at(Coordinate(0, 0)) == "#"
        assert grid.at(Coordinate(1, 1)) == "#"
        assert grid.at(Coordinate(1, 2)) == "."

    def test_iterable_of_lines(self) -> None:
        """A list of lines parses the same as a multi-line string."""
        assert parse_characters(["ab", "cd"]) == parse_characters("ab\ncd")

    def test_common_indentation_removed(self) -> None:
        """Indentation shared by every row is not part of the grid."""
        grid = parse_characters("    ab\n    cd")
        assert grid.cells == (("a", "b"), ("c", "d"))

    def test_spaces_beyond_indentation_are_cells(self) -> None:
        """A row starting with spaces keeps them as cells."""
        grid = parse_characters("""
            ..#
             .#
        """)
        assert grid.row_at(1) == (" ", ".", "#")

    def test_line_rows_keep_padding(self) -> None:
        """Lines from a list keep leading and trailing spaces."""
        grid = parse_characters(["  #\n", "#  "])
        assert grid.cols == 3
        assert grid.row_at(0) == (" ", " ", "#")
        assert grid.row_at(1) == ("#", " ", " ")

    def test_blank_lines_ignored(self) -> None:
        """Blank lines between rows are skipped."""
        definition = """

        ab

        cd

        """
        assert parse_characters(definition).rows == 2

    def test_error_empty(self) -> None:
        """Empty input raises MalformedGrid."""
        with pytest.raises(MalformedGrid, match="Input cannot be empty"):
            parse_characters("   \n  \n")

    def test_error_inconsistent_row_length(self) -> None:
        """Rows of different lengths are reported with their text."""
        with pytest.raises(MalformedGrid, match="Inconsistent row lengths") as exc_info:
            parse_characters(["abc", "ab", "abc", "abcd"])

        message = str(exc_info.value)
        assert 'Row 1: 2 columns - "ab"' in message
        assert 'Row 3: 4 columns - "abcd"' in message

    def test_malformed_is_value_error(self) -> None:
        """MalformedGrid can be caught as ValueError."""
        with pytest.raises(ValueError):
            parse_characters("")


class TestParseIntegers:
    """Tests for the digit grid parser."""

    def test_digits(self) -> None:
        """Each digit becomes an int cell."""
        grid = parse_integers("""
            012
            987
        """)
        assert grid.row_at(0) == (0, 1, 2)
        assert grid.row_at(1) == (9, 8, 7)

    def test_error_invalid_character(self) -> None:
        """Non-digits raise with the row and column."""
        with pytest.raises(ValueError, match="Invalid character 'x'") as exc_info:
            parse_integers(["123", "4x6"])

        message = str(exc_info.value)
        assert "Row 1, column 1" in message
        assert "Valid characters: digits (0-9)" in message


class TestParseBooleans:
    """Tests for the boolean grid parser."""

    def test_default_true_char(self) -> None:
        """'#' is True, everything else False."""
        grid = parse_booleans("#.\n.#")
        assert grid.cells == ((True, False), (False, True))

    def test_custom_true_char(self) -> None:
        """The true character can be chosen."""
        grid = parse_booleans("O.\n.#", true_char="O")
        assert grid.cells == ((True, False), (False, False))


class TestParseGrid:
    """Tests for the generic converter-based parser."""

    def test_custom_converter(self) -> None:
        """The converter is applied to every character."""
        grid = parse_grid(["ab", "cd"], str.upper)
        assert grid.cells == (("A", "B"), ("C", "D"))

    def test_converter_error_wrapped(self) -> None:
        """A converter ValueError is re-raised with position context."""

        def only_dots(char: str) -> str:
            if char != ".":
                raise ValueError("only dots allowed")
            return char

        with pytest.raises(ValueError, match="Invalid character '#'") as exc_info:
            parse_grid(["..", ".#"], only_dots)

        assert "only dots allowed" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, ValueError)
