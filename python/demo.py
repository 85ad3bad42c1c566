"""
Demonstration of the gridsearch toolkit on small puzzle-style inputs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ascii_render import render_path, render_regions
from grid_parser import parse_characters, parse_integers
from grid_types import Coordinate, Direction, Grid
from gridsearch import (
    count_acyclic_paths,
    find_groups,
    lowest_cost,
    region_perimeter,
    region_sides,
    shortest_path,
    state_after,
    trace_walk,
    turn_right_at,
)

HEIGHT_MAP = """
    Sabqponm
    abcryxxl
    accszExk
    acctuvwj
    abdefghi
"""

TRAIL_MAP = """
    89010123
    78121874
    87430965
    96549874
    45678903
    32019012
    01329801
    10456732
"""

GARDEN = """
    RRRRIICCFF
    RRRRIICCCF
    VVRRRCCFFF
    VVRCCCJFFF
    VVVVCJJCFE
    VVIVCCJJEE
    VVIIICJJEE
    MIIIIIJJEE
    MIIISIJEEE
    MMMISSJEEE
"""

LAB = """
    ....#.....
    .........#
    ..........
    ..#.......
    .......#..
    ..........
    .#..^.....
    ........#.
    #.........
    ......#...
"""


def elevation(char: str) -> int:
    return ord({"S": "a", "E": "z"}.get(char, char))


def demo_hill_climb(console: Console) -> None:
    """Fewest steps up a height map, climbing at most one level per step."""
    grid = parse_characters(HEIGHT_MAP)
    start = next(grid.find_value(lambda c: c == "S"))
    end = next(grid.find_value(lambda c: c == "E"))

    path = shortest_path(
        grid, start, end,
        is_valid_move=lambda cur, nxt: elevation(grid.at(nxt)) <= elevation(grid.at(cur)) + 1,
    )
    steps = "unreachable" if path is None else f"{len(path) - 1} steps"
    body = Text.from_ansi(render_path(grid, path, title="hill"))
    console.print(Panel(body, title=f"Shortest climb: {steps}", border_style="green"))


def demo_trails(console: Console) -> None:
    """Count rising trails from each trailhead to each summit."""
    grid = parse_integers(TRAIL_MAP)
    rising = lambda cur, nxt: grid.at(nxt) == grid.at(cur) + 1  # noqa: E731
    heads = list(grid.find_value(lambda h: h == 0))
    summits = list(grid.find_value(lambda h: h == 9))

    rating = sum(
        count_acyclic_paths(grid, head, summit, is_valid_move=rising)
        for head in heads
        for summit in summits
    )
    console.print(Panel(Text(f"{len(heads)} trailheads, total rating {rating}"), title="Trails"))


def demo_garden(console: Console) -> None:
    """Fence prices for garden regions: area x perimeter and area x sides."""
    grid = parse_characters(GARDEN)
    groups = find_groups(grid)
    regions = [region for value_regions in groups.values() for region in value_regions]

    by_perimeter = sum(len(r) * region_perimeter(r) for r in regions)
    by_sides = sum(len(r) * region_sides(r) for r in regions)

    body = Text.from_ansi(render_regions(grid, groups, title="garden"))
    body.append(f"\n{len(regions)} regions, perimeter price {by_perimeter}, sides price {by_sides}")
    console.print(Panel(body, title="Garden regions", border_style="cyan"))


def demo_guard(console: Console) -> None:
    """Patrol a lab, then count obstacle positions that trap the guard in a loop."""
    grid = parse_characters(LAB)
    start = next(grid.find_value(lambda c: c == "^"))
    turn = turn_right_at(lambda c: c == "#")

    walk = trace_walk(grid, start, Direction.N, turn)
    traps = sum(
        1
        for point in walk.visited - {start}
        if trace_walk(grid.update_at(point, "#"), start, Direction.N, turn).looped
    )
    body = Text.from_ansi(render_path(grid, sorted(walk.visited), title="lab"))
    body.append(f"\n{len(walk.visited)} cells patrolled, {traps} loop-inducing obstacles")
    console.print(Panel(body, title="Guard patrol", border_style="yellow"))


@dataclass(frozen=True)
class Crucible:
    """Weighted search state: position, heading and straight-line run length."""

    grid: Grid[int] = field(compare=False, repr=False)
    point: Coordinate
    heading: Direction
    run: int

    def is_goal(self) -> bool:
        return self.point == Coordinate(self.grid.rows - 1, self.grid.cols - 1)

    def neighbors(self) -> Iterable[tuple[Crucible, int]]:
        for heading in (self.heading, self.heading.rotate_left(), self.heading.rotate_right()):
            run = self.run + 1 if heading == self.heading else 1
            if run > 3:
                continue
            point = self.point.move(heading)
            if self.grid.exists(point):
                yield Crucible(self.grid, point, heading, run), self.grid.at(point)


def demo_crucible(console: Console) -> None:
    """Least heat loss across a city, at most three blocks in a straight line."""
    grid = parse_integers("""
        2413432311323
        3215453535623
        3255245654254
        3446585845452
        4546657867536
        1438598798454
        4457876987766
        3637877979653
        4654967986887
        4564679986453
        1224686865563
        2546548887735
        4322674655533
    """)
    starts = [Crucible(grid, Coordinate.origin(), heading, 0) for heading in (Direction.E, Direction.S)]
    costs = [c for c in (lowest_cost(s) for s in starts) if c is not None]
    console.print(Panel(Text(f"Least heat loss: {min(costs)}"), title="Crucible"))


def demo_cycle(console: Console) -> None:
    """Project a long-running modular sequence through its cycle."""
    value = state_after(1, lambda x: (x * 3) % 7, 1_000_000_000)
    console.print(Panel(Text(f"x -> 3x mod 7 after 10^9 steps from 1: {value}"), title="Cycle projection"))


def main() -> None:
    console = Console()
    demo_hill_climb(console)
    demo_trails(console)
    demo_garden(console)
    demo_guard(console)
    demo_crucible(console)
    demo_cycle(console)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
    main()
