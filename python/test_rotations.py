"""
Test rotation framework for systematic directional testing.

This module provides utilities to write search tests once and automatically
run them in all 4 rotations (0°, 90°, 180°, 270°). Distances, path counts,
region shapes and walk lengths must not depend on which way the grid faces.
"""

from dataclasses import dataclass, field
from typing import Callable

import pytest

from grid_parser import parse_characters, parse_integers
from grid_types import Coordinate, Direction, Grid, RotationDirection
from gridsearch import (
    count_acyclic_paths,
    find_groups,
    region_perimeter,
    region_sides,
    shortest_distance,
    trace_walk,
    turn_right_at,
)


# =============================================================================
# Rotation Utilities
# =============================================================================


def rotate_position_90(point: Coordinate, rows: int) -> Coordinate:
    """
    Rotate a position 90° clockwise within a grid of `rows` rows.

    In an N×M grid rotated 90° clockwise, it becomes M×N.
    Position (row, col) → (col, N - 1 - row)
    """
    return Coordinate(point.col, rows - 1 - point.row)


@dataclass
class RotationalTestCase:
    """
    A grid plus named points, run in all 4 rotations.

    Example usage:
        case = RotationalTestCase(
            name="detour",
            grid=parse_characters("..#|...".split("|")),
            points={"start": Coordinate(0, 0), "end": Coordinate(0, 2)},
        )
        run_rotational_test(case, lambda grid, points: ...)
    """

    name: str
    grid: Grid
    points: dict[str, Coordinate] = field(default_factory=dict)
    heading: Direction = Direction.N

    __test__ = False

    def rotate_90(self) -> "RotationalTestCase":
        """Create a new case rotated 90° clockwise."""
        return RotationalTestCase(
            name=f"{self.name} [rotated 90°]",
            grid=self.grid.rotate(RotationDirection.CLOCKWISE),
            points={key: rotate_position_90(p, self.grid.rows) for key, p in self.points.items()},
            heading=self.heading.rotate_right(),
        )

    def get_all_rotations(self) -> list[tuple[int, "RotationalTestCase"]]:
        """
        Generate all 4 rotations of this test case.

        Returns:
            List of (rotation_degrees, case) tuples
        """
        rotations = [(0, self)]
        current = self
        for degrees in (90, 180, 270):
            current = current.rotate_90()
            rotations.append((degrees, current))
        return rotations


def run_rotational_test(case: RotationalTestCase, measure: Callable[[RotationalTestCase], object]) -> None:
    """
    Assert that `measure` gives the same answer in every rotation.

    Args:
        case: Test case in its original orientation
        measure: Computes a rotation-independent result from a case
    """
    expected = measure(case)
    for degrees, rotated in case.get_all_rotations():
        actual = measure(rotated)
        assert actual == expected, (
            f"{case.name}: rotation {degrees}° gave {actual!r}, expected {expected!r}"
        )


# =============================================================================
# Measures
# =============================================================================


def not_wall(grid: Grid):
    return lambda cur, nxt: grid.at(nxt) != "#"


def walled_distance(case: RotationalTestCase) -> int | None:
    grid = case.grid
    return shortest_distance(grid, case.points["start"], case.points["end"], is_valid_move=not_wall(grid))


def rising_paths(case: RotationalTestCase) -> int:
    grid = case.grid
    return count_acyclic_paths(
        grid, case.points["start"], case.points["end"],
        is_valid_move=lambda cur, nxt: grid.at(nxt) == grid.at(cur) + 1,
    )


def region_profile(case: RotationalTestCase) -> list[tuple[int, int, int]]:
    """Sorted (area, perimeter, sides) of every region."""
    regions = [r for regions in find_groups(case.grid).values() for r in regions]
    return sorted((len(r), region_perimeter(r), region_sides(r)) for r in regions)


def patrol_length(case: RotationalTestCase) -> tuple[int, bool]:
    walk = trace_walk(
        case.grid, case.points["start"], case.heading, turn_right_at(lambda c: c == "#")
    )
    return len(walk.visited), walk.looped


# =============================================================================
# Tests
# =============================================================================


class TestRotationUtilities:
    """Tests for the rotation helpers themselves."""

    def test_rotated_position_keeps_value(self) -> None:
        """Every cell value follows its rotated position."""
        grid = parse_characters(["abc", "def"])
        rotated = grid.rotate(RotationDirection.CLOCKWISE)
        for point in grid.all_points():
            assert rotated.at(rotate_position_90(point, grid.rows)) == grid.at(point)

    def test_four_rotations_restore_case(self) -> None:
        """Rotating a case four times returns the original grid and points."""
        case = RotationalTestCase(
            name="round trip",
            grid=parse_characters(["ab.", "..#"]),
            points={"start": Coordinate(0, 1)},
            heading=Direction.E,
        )
        current = case
        for _ in range(4):
            current = current.rotate_90()
        assert current.grid == case.grid
        assert current.points == case.points
        assert current.heading == case.heading


class TestRotationalInvariance:
    """Search results are the same in every orientation."""

    @pytest.mark.parametrize(
        "rows,start,end",
        [
            (["..#..", "..#..", "....."], Coordinate(0, 0), Coordinate(0, 4)),
            (["..#..", "..#..", "..#.."], Coordinate(0, 0), Coordinate(0, 4)),
            (["....", ".##.", "...#"], Coordinate(2, 0), Coordinate(0, 3)),
        ],
    )
    def test_shortest_distance(self, rows: list[str], start: Coordinate, end: Coordinate) -> None:
        """BFS distance does not depend on orientation."""
        case = RotationalTestCase("bfs", parse_characters(rows), {"start": start, "end": end})
        run_rotational_test(case, walled_distance)

    def test_path_count(self) -> None:
        """Rising path counts do not depend on orientation."""
        case = RotationalTestCase(
            "ramp",
            parse_integers(["0123", "1234", "2345"]),
            {"start": Coordinate(0, 0), "end": Coordinate(2, 3)},
        )
        assert rising_paths(case) == 10
        run_rotational_test(case, rising_paths)

    def test_regions(self) -> None:
        """Region areas, perimeters and sides do not depend on orientation."""
        case = RotationalTestCase("garden", parse_characters(["AAAA", "BBCD", "BBCC", "EEEC"]))
        run_rotational_test(case, region_profile)

    def test_patrol(self) -> None:
        """A turn-right patrol covers the same cells when the lab is rotated."""
        case = RotationalTestCase(
            "patrol",
            parse_characters(["..#...", ".....#", "......", ".#..^."]),
            {"start": Coordinate(3, 4)},
            heading=Direction.N,
        )
        run_rotational_test(case, patrol_length)
