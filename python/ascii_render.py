"""
ASCII rendering for gridsearch results.

Provides two rendering approaches:
1. Boxed grid rendering with highlighted cells (e.g. a shortest path)
2. Region rendering - each flood-filled region in its own colour
"""

from __future__ import annotations

import logging
from typing import Callable, Collection, Iterable, TypeVar

from simple_chalk import chalk  # type: ignore[import-untyped]

from grid_types import Coordinate, Grid

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Colour palette cycled through for regions
PALETTE: list[Callable[[str], str]] = [
    chalk.red,
    chalk.green,
    chalk.yellow,
    chalk.blue,
    chalk.magenta,
    chalk.cyan,
    chalk.redBright,
    chalk.greenBright,
    chalk.yellowBright,
    chalk.blueBright,
]


def _cell_char(value: object) -> str:
    """Default cell display: first character of str(value)."""
    text = str(value)
    return text[0] if text else "?"


def render_grid(
    grid: Grid[T],
    title: str | None = None,
    cell_width: int = 1,
    highlight: Collection[Coordinate] = (),
    cell_fn: Callable[[T], str] | None = None,
    color_fn: Callable[[Coordinate], Callable[[str], str]] | None = None,
) -> list[str]:
    """
    Render a grid as a bordered character display.

    Args:
        grid: The grid to render
        title: Optional title centred in the top border
        cell_width: Characters per cell (default 1)
        highlight: Coordinates drawn with a white background
        cell_fn: Converts a cell value to its display character
        color_fn: Optional function returning a colouriser per coordinate

    Returns:
        List of strings representing the rendered grid lines
    """
    if cell_width < 1:
        raise ValueError(f"cell_width must be at least 1, got {cell_width}")
    if cell_fn is None:
        cell_fn = _cell_char
    highlighted = set(highlight)

    grid_width = grid.cols * cell_width + 2  # left and right borders
    lines: list[str] = []

    # Top border with title
    title_line = "┌" + "─" * (grid_width - 2) + "┐"
    if title is not None:
        label = f" {title} "
        if len(label) <= grid_width - 2:
            title_start = (grid_width - len(label)) // 2
            title_line = (
                "┌" +
                "─" * (title_start - 1) +
                label +
                "─" * (grid_width - title_start - len(label) - 1) +
                "┐"
            )
    lines.append(title_line)

    for r_idx, row in enumerate(grid.cells):
        line_parts = ["│"]
        for c_idx, value in enumerate(row):
            point = Coordinate(r_idx, c_idx)
            content = cell_fn(value)
            if cell_width > 1:
                content = content.center(cell_width)

            if point in highlighted:
                content = chalk.bgWhite.black(content)
            elif color_fn is not None:
                content = color_fn(point)(content)

            line_parts.append(content)
        line_parts.append("│")
        lines.append("".join(line_parts))

    lines.append("└" + "─" * (grid_width - 2) + "┘")
    return lines


def render_path(grid: Grid[T], path: Iterable[Coordinate] | None, title: str | None = None) -> str:
    """Render a grid with a path highlighted. A missing path renders the plain grid."""
    if path is None:
        logger.info("No path to highlight; rendering plain grid")
        path = ()
    return "\n".join(render_grid(grid, title=title, highlight=tuple(path)))


def render_regions(
    grid: Grid[T],
    groups: dict[T, set[frozenset[Coordinate]]],
    title: str | None = None,
) -> str:
    """
    Render a grid with every region in its own palette colour.

    Regions are ordered by their first cell in row-major order so the
    colouring is stable between runs.
    """
    regions = sorted(
        (region for value_regions in groups.values() for region in value_regions),
        key=min,
    )
    color_by_point: dict[Coordinate, Callable[[str], str]] = {}
    for i, region in enumerate(regions):
        colorize = PALETTE[i % len(PALETTE)]
        for point in region:
            color_by_point[point] = colorize

    logger.debug("Rendering %d regions with %d colours", len(regions), len(PALETTE))

    def color_fn(point: Coordinate) -> Callable[[str], str]:
        return color_by_point.get(point, lambda s: s)

    return "\n".join(render_grid(grid, title=title, color_fn=color_fn))
