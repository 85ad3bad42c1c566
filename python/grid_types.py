"""
Shared type definitions for the gridsearch toolkit.

Coordinate -> AdjacencySelector -> Grid. Everything here is an immutable
value: moving a coordinate or updating a grid returns a new object.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Iterable, Iterator, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


# =============================================================================
# Errors
# =============================================================================


class OutOfBounds(IndexError):
    """A coordinate or index lies outside a grid."""

    def __init__(self, point: "Coordinate | int", rows: int, cols: int) -> None:
        self.point = point
        self.rows = rows
        self.cols = cols
        super().__init__(f"{point} is outside grid of {rows} rows x {cols} columns")


class MalformedGrid(ValueError):
    """Grid rows are missing or have inconsistent lengths."""


# =============================================================================
# Directions
# =============================================================================


class Direction(Enum):
    """Compass direction for movement."""

    N = "N"  # Up (decreasing row)
    NE = "NE"
    E = "E"  # Right (increasing col)
    SE = "SE"
    S = "S"  # Down (increasing row)
    SW = "SW"
    W = "W"  # Left (decreasing col)
    NW = "NW"
    INVALID = "INVALID"

    @property
    def delta(self) -> tuple[int, int]:
        """(row_delta, col_delta) for one step in this direction."""
        if self is Direction.INVALID:
            raise ValueError("Direction.INVALID has no movement delta")
        return _DELTAS[self]

    @property
    def is_cardinal(self) -> bool:
        return self in _CARDINAL

    @property
    def is_diagonal(self) -> bool:
        return self in _DIAGONAL

    def opposite(self) -> Direction:
        if self is Direction.INVALID:
            return Direction.INVALID
        dr, dc = self.delta
        return _BY_DELTA[(-dr, -dc)]

    def rotate_right(self) -> Direction:
        """Turn 90 degrees clockwise."""
        if self is Direction.INVALID:
            raise ValueError("Cannot rotate Direction.INVALID")
        dr, dc = self.delta
        return _BY_DELTA[(dc, -dr)]

    def rotate_left(self) -> Direction:
        """Turn 90 degrees anti-clockwise."""
        if self is Direction.INVALID:
            raise ValueError("Cannot rotate Direction.INVALID")
        dr, dc = self.delta
        return _BY_DELTA[(-dc, dr)]

    @staticmethod
    def cardinal() -> tuple[Direction, ...]:
        """Cardinal directions in neighbor order."""
        return _CARDINAL

    @staticmethod
    def diagonal() -> tuple[Direction, ...]:
        """Diagonal directions in neighbor order."""
        return _DIAGONAL

    @staticmethod
    def all() -> tuple[Direction, ...]:
        """All eight directions in neighbor order."""
        return _CARDINAL + _DIAGONAL

    @staticmethod
    def parse(symbol: str) -> Direction:
        """
        Look up a direction by name or symbol, case-insensitively.

        Accepts member names ("N", "se"), the letters U/D/L/R and the
        glyphs ^ v < >. Anything else parses to Direction.INVALID.
        """
        key = symbol.strip()
        if key in _SYMBOLS:
            return _SYMBOLS[key]
        key = key.upper()
        if key in _SYMBOLS:
            return _SYMBOLS[key]
        for direction in Direction:
            if direction is not Direction.INVALID and direction.value == key:
                return direction
        return Direction.INVALID


_DELTAS: dict[Direction, tuple[int, int]] = {
    Direction.N: (-1, 0),
    Direction.NE: (-1, 1),
    Direction.E: (0, 1),
    Direction.SE: (1, 1),
    Direction.S: (1, 0),
    Direction.SW: (1, -1),
    Direction.W: (0, -1),
    Direction.NW: (-1, -1),
}
_BY_DELTA: dict[tuple[int, int], Direction] = {delta: d for d, delta in _DELTAS.items()}

# Neighbor order: N, S, E, W then NE, NW, SE, SW
_CARDINAL: tuple[Direction, ...] = (Direction.N, Direction.S, Direction.E, Direction.W)
_DIAGONAL: tuple[Direction, ...] = (Direction.NE, Direction.NW, Direction.SE, Direction.SW)

_SYMBOLS: dict[str, Direction] = {
    "^": Direction.N,
    "v": Direction.S,
    ">": Direction.E,
    "<": Direction.W,
    "U": Direction.N,
    "D": Direction.S,
    "R": Direction.E,
    "L": Direction.W,
}


class RotationDirection(Enum):
    """Direction to rotate a grid by 90 degrees."""

    CLOCKWISE = "clockwise"
    ANTI_CLOCKWISE = "anti_clockwise"


# =============================================================================
# Coordinate
# =============================================================================


@dataclass(frozen=True, order=True)
class Coordinate:
    """An integer (row, col) point. Rows grow downwards, columns rightwards."""

    row: int
    col: int

    @staticmethod
    def origin() -> Coordinate:
        return Coordinate(0, 0)

    def move(self, direction: Direction, steps: int = 1) -> Coordinate:
        """Move `steps` cells in `direction`."""
        if direction is Direction.INVALID:
            raise ValueError(f"Cannot move {self} in direction {direction}")
        dr, dc = direction.delta
        return Coordinate(self.row + dr * steps, self.col + dc * steps)

    def shift(self, row_delta: int, col_delta: int) -> Coordinate:
        return Coordinate(self.row + row_delta, self.col + col_delta)

    def delta_to(self, other: Coordinate) -> tuple[int, int]:
        """(row_delta, col_delta) that moves this coordinate onto `other`."""
        return (other.row - self.row, other.col - self.col)

    def manhattan_distance(self, other: Coordinate) -> int:
        return abs(self.row - other.row) + abs(self.col - other.col)

    def chebyshev_distance(self, other: Coordinate) -> int:
        return max(abs(self.row - other.row), abs(self.col - other.col))

    def __str__(self) -> str:
        return f"({self.row}, {self.col})"


# =============================================================================
# Adjacency
# =============================================================================


class AdjacentDirection(Enum):
    """Which directions count as adjacent."""

    CARDINAL = "cardinal"  # N, S, E, W
    DIAGONAL = "diagonal"  # NE, NW, SE, SW
    ALL = "all"  # cardinal then diagonal

    @property
    def directions(self) -> tuple[Direction, ...]:
        match self:
            case AdjacentDirection.CARDINAL:
                return Direction.cardinal()
            case AdjacentDirection.DIAGONAL:
                return Direction.diagonal()
            case AdjacentDirection.ALL:
                return Direction.all()


@dataclass(frozen=True)
class AdjacencySelector:
    """
    Policy describing which cells neighbor a coordinate.

    Attributes:
        direction: Which directions to step in
        bounded: Drop neighbors outside [0, rows) x [0, cols)
        with_self: Include the coordinate itself (first)
        perimeter_only: Keep only neighbors on the grid border (requires bounded)
    """

    direction: AdjacentDirection = AdjacentDirection.CARDINAL
    bounded: bool = True
    with_self: bool = False
    perimeter_only: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.direction, AdjacentDirection):
            raise ValueError(f"Invalid adjacency direction: {self.direction!r}")
        if self.perimeter_only and not self.bounded:
            raise ValueError("perimeter_only requires a bounded selector")

    @classmethod
    def bounded_to(
        cls,
        direction: AdjacentDirection = AdjacentDirection.CARDINAL,
        with_self: bool = False,
        perimeter_only: bool = False,
    ) -> AdjacencySelector:
        return cls(direction, bounded=True, with_self=with_self, perimeter_only=perimeter_only)

    @classmethod
    def unbounded(
        cls,
        direction: AdjacentDirection = AdjacentDirection.CARDINAL,
        with_self: bool = False,
    ) -> AdjacencySelector:
        return cls(direction, bounded=False, with_self=with_self)

    def neighbors(
        self, point: Coordinate, rows: int | None = None, cols: int | None = None
    ) -> tuple[Coordinate, ...]:
        """
        Neighboring coordinates of `point` in fixed order.

        Bounded selectors need the grid dimensions; unbounded selectors
        ignore them and may return negative coordinates.
        """
        candidates: list[Coordinate] = [point] if self.with_self else []
        candidates.extend(point.move(d) for d in self.direction.directions)

        if not self.bounded:
            return tuple(candidates)

        if rows is None or cols is None:
            raise ValueError("A bounded selector needs the grid rows and cols")

        in_bounds = [c for c in candidates if 0 <= c.row < rows and 0 <= c.col < cols]
        if self.perimeter_only:
            return tuple(
                c for c in in_bounds
                if c.row in (0, rows - 1) or c.col in (0, cols - 1)
            )
        return tuple(in_bounds)


CARDINAL = AdjacencySelector()
ALL_DIRECTIONS = AdjacencySelector(AdjacentDirection.ALL)


# =============================================================================
# Grid
# =============================================================================


@dataclass(frozen=True)
class Grid(Generic[T]):
    """
    A rectangular 2D grid of values.

    Rows must all be the same length and the grid must hold at least one
    cell. Every "mutation" returns a new Grid and leaves the receiver as is.
    """

    cells: tuple[tuple[T, ...], ...]

    def __post_init__(self) -> None:
        # Rows may arrive as lists or strings; cells are always nested tuples
        object.__setattr__(self, "cells", tuple(tuple(row) for row in self.cells))
        if not self.cells or not self.cells[0]:
            raise MalformedGrid("Grid must have at least one row and one column")

        cols = len(self.cells[0])
        mismatched = [(i, len(row)) for i, row in enumerate(self.cells) if len(row) != cols]
        if mismatched:
            error_msg = (
                f"Inconsistent row lengths in grid\n"
                f"  Expected: {cols} columns (from row 0)\n"
                f"  Mismatched rows:\n"
            )
            for row_idx, actual_cols in mismatched:
                error_msg += f"    Row {row_idx}: {actual_cols} columns\n"
            error_msg += "  All rows must have the same number of cells"
            raise MalformedGrid(error_msg)

    @classmethod
    def of(cls, rows: Iterable[Iterable[T]]) -> Grid[T]:
        """Build a grid from any nested iterable (lists, strings, ...)."""
        return cls(tuple(rows))

    @classmethod
    def filled(cls, rows: int, cols: int, value: T) -> Grid[T]:
        return cls(tuple(tuple(value for _ in range(cols)) for _ in range(rows)))

    @property
    def rows(self) -> int:
        return len(self.cells)

    @property
    def cols(self) -> int:
        return len(self.cells[0])

    @property
    def cell_count(self) -> int:
        return self.rows * self.cols

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def exists(self, point: Coordinate) -> bool:
        return 0 <= point.row < self.rows and 0 <= point.col < self.cols

    def at(self, point: Coordinate) -> T:
        if not self.exists(point):
            raise OutOfBounds(point, self.rows, self.cols)
        return self.cells[point.row][point.col]

    def row_at(self, index: int) -> tuple[T, ...]:
        if not 0 <= index < self.rows:
            raise OutOfBounds(index, self.rows, self.cols)
        return self.cells[index]

    def column_at(self, index: int) -> tuple[T, ...]:
        if not 0 <= index < self.cols:
            raise OutOfBounds(index, self.rows, self.cols)
        return tuple(row[index] for row in self.cells)

    def all_points(self) -> Iterator[Coordinate]:
        """Every coordinate in row-major order."""
        for r in range(self.rows):
            for c in range(self.cols):
                yield Coordinate(r, c)

    def find_value(self, predicate: Callable[[T], bool]) -> Iterator[Coordinate]:
        """Lazily yield coordinates whose value matches, in row-major order."""
        for r, row in enumerate(self.cells):
            for c, value in enumerate(row):
                if predicate(value):
                    yield Coordinate(r, c)

    def find_rows_with(self, predicate: Callable[[T], bool]) -> list[int]:
        """Indexes of rows where every value matches."""
        return [i for i, row in enumerate(self.cells) if all(predicate(v) for v in row)]

    def find_columns_with(self, predicate: Callable[[T], bool]) -> list[int]:
        """Indexes of columns where every value matches."""
        return [
            c for c in range(self.cols)
            if all(predicate(row[c]) for row in self.cells)
        ]

    def count(self, predicate: Callable[[T], bool]) -> int:
        return sum(1 for row in self.cells for value in row if predicate(value))

    def sum_values(self, evaluator: Callable[[T], int]) -> int:
        return sum(evaluator(value) for row in self.cells for value in row)

    def neighbors(self, point: Coordinate, selector: AdjacencySelector = CARDINAL) -> tuple[Coordinate, ...]:
        return selector.neighbors(point, self.rows, self.cols)

    def is_corner(self, point: Coordinate) -> bool:
        return point.row in (0, self.rows - 1) and point.col in (0, self.cols - 1)

    def border_points(self) -> frozenset[Coordinate]:
        points: set[Coordinate] = set()
        for c in range(self.cols):
            points.add(Coordinate(0, c))
            points.add(Coordinate(self.rows - 1, c))
        for r in range(self.rows):
            points.add(Coordinate(r, 0))
            points.add(Coordinate(r, self.cols - 1))
        return frozenset(points)

    def perimeter_coordinates_by_incoming_direction(self) -> dict[Direction, frozenset[Coordinate]]:
        """
        Border cells keyed by the direction of travel that enters the grid there.

        Moving S from above the grid lands on the top row, moving N from
        below lands on the bottom row, and so on. Corner cells appear under
        two directions.
        """
        last_row = self.rows - 1
        last_col = self.cols - 1
        return {
            Direction.S: frozenset(Coordinate(0, c) for c in range(self.cols)),
            Direction.N: frozenset(Coordinate(last_row, c) for c in range(self.cols)),
            Direction.E: frozenset(Coordinate(r, 0) for r in range(self.rows)),
            Direction.W: frozenset(Coordinate(r, last_col) for r in range(self.rows)),
        }

    # -------------------------------------------------------------------------
    # Transforms (each returns a new Grid)
    # -------------------------------------------------------------------------

    def update_at(self, point: Coordinate, value: T) -> Grid[T]:
        """Copy of this grid with one cell replaced."""
        if not self.exists(point):
            raise OutOfBounds(point, self.rows, self.cols)
        row = self.cells[point.row]
        new_row = row[: point.col] + (value,) + row[point.col + 1 :]
        return Grid(self.cells[: point.row] + (new_row,) + self.cells[point.row + 1 :])

    def update_box(
        self, top_left: Coordinate, bottom_right: Coordinate, update: Callable[[T], T]
    ) -> Grid[T]:
        """Apply `update` to every cell in the inclusive box between the corners."""
        for corner in (top_left, bottom_right):
            if not self.exists(corner):
                raise OutOfBounds(corner, self.rows, self.cols)
        if top_left.row > bottom_right.row or top_left.col > bottom_right.col:
            raise ValueError(f"Box corners out of order: {top_left} to {bottom_right}")

        rows = list(self.cells)
        for r in range(top_left.row, bottom_right.row + 1):
            row = list(rows[r])
            for c in range(top_left.col, bottom_right.col + 1):
                row[c] = update(row[c])
            rows[r] = tuple(row)
        return Grid(tuple(rows))

    def update_corners(self, value: T) -> Grid[T]:
        grid = self
        for point in {
            Coordinate(0, 0),
            Coordinate(0, self.cols - 1),
            Coordinate(self.rows - 1, 0),
            Coordinate(self.rows - 1, self.cols - 1),
        }:
            grid = grid.update_at(point, value)
        return grid

    def transform(self, fn: Callable[[Coordinate, T], U]) -> Grid[U]:
        """New grid whose cells are fn(coordinate, value) of this grid's cells."""
        return Grid(
            tuple(
                tuple(fn(Coordinate(r, c), value) for c, value in enumerate(row))
                for r, row in enumerate(self.cells)
            )
        )

    def transpose(self) -> Grid[T]:
        """Flip along the main diagonal: (row, col) -> (col, row)."""
        return Grid(tuple(zip(*self.cells)))

    def rotate(self, rotation: RotationDirection) -> Grid[T]:
        """
        Rotate 90 degrees.

        An N x M grid becomes M x N. Clockwise maps (row, col) to
        (col, N - 1 - row).
        """
        match rotation:
            case RotationDirection.CLOCKWISE:
                return Grid(tuple(tuple(reversed(column)) for column in zip(*self.cells)))
            case RotationDirection.ANTI_CLOCKWISE:
                return Grid(tuple(reversed(tuple(zip(*self.cells)))))
            case _:
                raise ValueError(f"Unknown rotation: {rotation}")

    def to_lists(self) -> list[list[T]]:
        return [list(row) for row in self.cells]
