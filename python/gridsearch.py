"""
Search algorithms over grids and abstract state graphs.

Unweighted shortest paths (BFS), weighted shortest cost (Dijkstra over
SearchNode), exhaustive path enumeration, region grouping (flood fill),
cycle detection over iterated transforms, and walk-loop detection.

"No result" outcomes (unreachable target, no goal state, no cycle within
budget) are returned as None. Exceptions are reserved for caller mistakes.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Collection, Generic, Hashable, Iterable, Iterator, Protocol, TypeVar

from grid_types import (
    CARDINAL,
    AdjacencySelector,
    Coordinate,
    Direction,
    Grid,
    OutOfBounds,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
S = TypeVar("S", bound=Hashable)
N = TypeVar("N", bound="SearchNode")

# Type alias for neighbor-validity predicates: (current, candidate) -> allowed
MoveFilter = Callable[[Coordinate, Coordinate], bool]

Path = tuple[Coordinate, ...]


def _as_coordinates(points: Coordinate | Iterable[Coordinate]) -> tuple[Coordinate, ...]:
    if isinstance(points, Coordinate):
        return (points,)
    return tuple(points)


def _require_in_grid(grid: Grid, points: Iterable[Coordinate], selector: AdjacencySelector) -> None:
    if not selector.bounded:
        return
    for point in points:
        if not grid.exists(point):
            raise OutOfBounds(point, grid.rows, grid.cols)


def _moves(
    grid: Grid,
    point: Coordinate,
    selector: AdjacencySelector,
    is_valid_move: MoveFilter | None,
) -> Iterator[Coordinate]:
    """Neighbors of `point` that the move filter accepts, in selector order."""
    for candidate in selector.neighbors(point, grid.rows, grid.cols):
        if candidate == point:
            continue
        if is_valid_move is None or is_valid_move(point, candidate):
            yield candidate


# =============================================================================
# Unweighted Path Search (BFS)
# =============================================================================


def _breadth_first(
    grid: Grid,
    sources: Coordinate | Iterable[Coordinate],
    targets: Coordinate | Iterable[Coordinate],
    selector: AdjacencySelector,
    is_valid_move: MoveFilter | None,
) -> tuple[Coordinate | None, dict[Coordinate, Coordinate | None], dict[Coordinate, int]]:
    """
    Multi-source BFS. Stops when a target is dequeued.

    Returns (reached_target, parents, distances). reached_target is None
    when the frontier empties first.
    """
    origins = _as_coordinates(sources)
    _require_in_grid(grid, origins, selector)
    goal = frozenset(_as_coordinates(targets))

    parents: dict[Coordinate, Coordinate | None] = {p: None for p in origins}
    distances: dict[Coordinate, int] = {p: 0 for p in origins}
    queue: deque[Coordinate] = deque(parents)

    while queue:
        current = queue.popleft()
        if current in goal:
            logger.debug(
                "BFS reached %s at distance %d (%d cells discovered)",
                current, distances[current], len(distances),
            )
            return current, parents, distances

        for candidate in _moves(grid, current, selector, is_valid_move):
            if candidate not in parents:
                parents[candidate] = current
                distances[candidate] = distances[current] + 1
                queue.append(candidate)

    logger.debug("BFS exhausted frontier after discovering %d cells", len(distances))
    return None, parents, distances


def shortest_distance(
    grid: Grid,
    sources: Coordinate | Iterable[Coordinate],
    targets: Coordinate | Iterable[Coordinate],
    selector: AdjacencySelector = CARDINAL,
    is_valid_move: MoveFilter | None = None,
) -> int | None:
    """
    Fewest moves from any source to any target.

    All sources start at distance 0. Moves go to the selector's neighbors
    that pass `is_valid_move(current, candidate)`; with an unbounded
    selector the filter is the only thing keeping the search finite.

    Args:
        grid: Grid being searched (supplies bounds)
        sources: One coordinate or several
        targets: One coordinate or several; the nearest one wins
        selector: Neighbor policy (default: cardinal, bounded)
        is_valid_move: Optional filter on (current, candidate)

    Returns:
        Number of edges on a shortest path, or None if no target is reachable

    Raises:
        OutOfBounds: If a source lies outside the grid for a bounded selector
    """
    reached, _, distances = _breadth_first(grid, sources, targets, selector, is_valid_move)
    if reached is None:
        return None
    return distances[reached]


def shortest_path(
    grid: Grid,
    sources: Coordinate | Iterable[Coordinate],
    targets: Coordinate | Iterable[Coordinate],
    selector: AdjacencySelector = CARDINAL,
    is_valid_move: MoveFilter | None = None,
) -> Path | None:
    """
    One shortest path from a source to the nearest target, both inclusive.

    Ties are broken by the selector's neighbor order. Returns None if no
    target is reachable.
    """
    reached, parents, _ = _breadth_first(grid, sources, targets, selector, is_valid_move)
    if reached is None:
        return None

    path: list[Coordinate] = []
    at: Coordinate | None = reached
    while at is not None:
        path.append(at)
        at = parents[at]
    path.reverse()
    return tuple(path)


def distances_from(
    grid: Grid,
    sources: Coordinate | Iterable[Coordinate],
    selector: AdjacencySelector = CARDINAL,
    is_valid_move: MoveFilter | None = None,
) -> dict[Coordinate, int]:
    """BFS distance to every coordinate reachable from the sources."""
    _, _, distances = _breadth_first(grid, sources, (), selector, is_valid_move)
    return distances


# =============================================================================
# Weighted Path Search (Dijkstra)
# =============================================================================


class SearchNode(Protocol):
    """
    A state in a weighted search graph.

    Implementations must be hashable with value equality: two nodes that
    compare equal are the same state, so any auxiliary data that changes
    what is reachable (remaining mana, facing direction, ...) belongs in the
    state.
    """

    def is_goal(self) -> bool:
        ...

    def neighbors(self) -> Iterable[tuple[SearchNode, int]]:
        """(next_state, step_cost) pairs reachable in one move. Costs must be >= 0."""
        ...


@dataclass(frozen=True)
class WeightedPath(Generic[N]):
    """Result of a cheapest-path search."""

    cost: int
    states: tuple[N, ...]  # start .. goal inclusive


def _dijkstra(start: N) -> tuple[N | None, dict[N, int], dict[N, N | None]]:
    best: dict[N, int] = {start: 0}
    parents: dict[N, N | None] = {start: None}
    visited: set[N] = set()
    # Counter breaks cost ties so nodes themselves are never compared
    counter = itertools.count()
    frontier: list[tuple[int, int, N]] = [(0, next(counter), start)]

    while frontier:
        cost, _, node = heapq.heappop(frontier)
        if node in visited:
            continue
        visited.add(node)

        if node.is_goal():
            logger.debug("Dijkstra reached goal at cost %d (%d states settled)", cost, len(visited))
            return node, best, parents

        for neighbor, step_cost in node.neighbors():
            if step_cost < 0:
                raise ValueError(
                    f"Negative step cost {step_cost} from {node!r} to {neighbor!r}\n"
                    f"  Dijkstra search requires non-negative costs"
                )
            if neighbor in visited:
                continue
            new_cost = cost + step_cost
            known = best.get(neighbor)
            if known is None or new_cost < known:
                best[neighbor] = new_cost
                parents[neighbor] = node
                heapq.heappush(frontier, (new_cost, next(counter), neighbor))

    logger.debug("Dijkstra exhausted frontier after settling %d states", len(visited))
    return None, best, parents


def lowest_cost(start: SearchNode) -> int | None:
    """
    Lowest cumulative cost from `start` to any goal state.

    Returns None when no goal is reachable ("no winning strategy").

    Raises:
        ValueError: If a negative step cost is encountered
    """
    goal, best, _ = _dijkstra(start)
    if goal is None:
        return None
    return best[goal]


def cheapest_path(start: N) -> WeightedPath[N] | None:
    """Like lowest_cost, but also returns the sequence of states taken."""
    goal, best, parents = _dijkstra(start)
    if goal is None:
        return None

    states: list[N] = []
    at: N | None = goal
    while at is not None:
        states.append(at)
        at = parents[at]
    states.reverse()
    return WeightedPath(best[goal], tuple(states))


# =============================================================================
# Exhaustive Path Enumeration
# =============================================================================


def iter_paths(
    grid: Grid,
    start: Coordinate,
    end: Coordinate,
    selector: AdjacencySelector = CARDINAL,
    is_valid_move: MoveFilter | None = None,
) -> Iterator[Path]:
    """
    Lazily yield every simple path from `start` to `end`.

    A path never repeats a coordinate and stops as soon as it reaches
    `end`. Runs depth-first with an explicit stack, so deep grids do not
    hit the recursion limit.

    Warning: the number of simple paths is exponential in general. Only use
    this when `is_valid_move` already bounds the search, e.g. a strictly
    increasing height rule that makes the move graph acyclic. No
    memoization is applied; see count_acyclic_paths for that case.
    """
    _require_in_grid(grid, (start, end), selector)
    if start == end:
        yield (start,)
        return

    path: list[Coordinate] = [start]
    on_path: set[Coordinate] = {start}
    stack: list[Iterator[Coordinate]] = [_moves(grid, start, selector, is_valid_move)]

    while stack:
        candidate = next(stack[-1], None)
        if candidate is None:
            stack.pop()
            on_path.discard(path.pop())
            continue
        if candidate in on_path:
            continue
        if candidate == end:
            yield tuple(path) + (candidate,)
            continue

        path.append(candidate)
        on_path.add(candidate)
        stack.append(_moves(grid, candidate, selector, is_valid_move))


def all_paths(
    grid: Grid,
    start: Coordinate,
    end: Coordinate,
    selector: AdjacencySelector = CARDINAL,
    is_valid_move: MoveFilter | None = None,
) -> list[Path]:
    """Every simple path from `start` to `end`. Exponential; see iter_paths."""
    return list(iter_paths(grid, start, end, selector, is_valid_move))


def count_paths(
    grid: Grid,
    start: Coordinate,
    end: Coordinate,
    selector: AdjacencySelector = CARDINAL,
    is_valid_move: MoveFilter | None = None,
) -> int:
    """Number of simple paths from `start` to `end`. Exponential; see iter_paths."""
    total = sum(1 for _ in iter_paths(grid, start, end, selector, is_valid_move))
    logger.debug("Enumerated %d paths from %s to %s", total, start, end)
    return total


def count_acyclic_paths(
    grid: Grid,
    start: Coordinate,
    end: Coordinate,
    selector: AdjacencySelector = CARDINAL,
    is_valid_move: MoveFilter | None = None,
) -> int:
    """
    Number of paths from `start` to `end` when the move graph is acyclic.

    Memoizes the path count of each coordinate in a table owned by this
    call, so it runs in O(cells) instead of enumerating every path.

    Raises:
        ValueError: If the moves reachable from `start` contain a cycle
    """
    _require_in_grid(grid, (start, end), selector)
    if start == end:
        return 1

    paths_to_end: dict[Coordinate, int] = {end: 1}
    on_stack: set[Coordinate] = {start}
    first = tuple(_moves(grid, start, selector, is_valid_move))
    stack: list[tuple[Coordinate, tuple[Coordinate, ...], Iterator[Coordinate]]] = [
        (start, first, iter(first))
    ]

    while stack:
        point, successors, pending = stack[-1]
        nxt = next(pending, None)
        if nxt is None:
            stack.pop()
            on_stack.discard(point)
            paths_to_end[point] = sum(paths_to_end[s] for s in successors)
            continue
        if nxt in paths_to_end:
            continue
        if nxt in on_stack:
            raise ValueError(
                f"Move graph contains a cycle through {nxt}\n"
                f"  count_acyclic_paths requires moves that never revisit a cell\n"
                f"  Use count_paths to enumerate simple paths instead"
            )
        children = tuple(_moves(grid, nxt, selector, is_valid_move))
        on_stack.add(nxt)
        stack.append((nxt, children, iter(children)))

    return paths_to_end[start]


# =============================================================================
# Component Grouping (Flood Fill)
# =============================================================================


def flood_fill(
    grid: Grid[T],
    seed: Coordinate,
    is_connected: MoveFilter | None = None,
    selector: AdjacencySelector = CARDINAL,
) -> frozenset[Coordinate]:
    """
    The region grown from `seed` through connected neighbors.

    By default two neighbors are connected when they hold equal values;
    with an unbounded selector off-grid neighbors are never connected.
    """
    if not grid.exists(seed):
        raise OutOfBounds(seed, grid.rows, grid.cols)
    if is_connected is None:
        def is_connected(current: Coordinate, candidate: Coordinate) -> bool:
            return grid.exists(candidate) and grid.at(current) == grid.at(candidate)

    region: set[Coordinate] = {seed}
    queue: deque[Coordinate] = deque([seed])
    while queue:
        current = queue.popleft()
        for candidate in _moves(grid, current, selector, is_connected):
            if candidate not in region:
                region.add(candidate)
                queue.append(candidate)
    return frozenset(region)


def find_groups(grid: Grid[T]) -> dict[T, set[frozenset[Coordinate]]]:
    """
    Partition the grid into maximal 4-connected same-value regions.

    Returns a mapping from each value to its regions. Every coordinate is in
    exactly one region; diagonal contact does not join regions.
    """
    groups: dict[T, set[frozenset[Coordinate]]] = {}
    assigned: set[Coordinate] = set()

    for point in grid.all_points():
        if point in assigned:
            continue
        region = flood_fill(grid, point)
        assigned.update(region)
        groups.setdefault(grid.at(point), set()).add(region)

    logger.debug(
        "Grouped %d cells into %d regions across %d values",
        grid.cell_count, sum(len(r) for r in groups.values()), len(groups),
    )
    return groups


def region_perimeter(region: Collection[Coordinate]) -> int:
    """Number of unit edges separating the region from everything else."""
    return sum(
        1
        for point in region
        for direction in Direction.cardinal()
        if point.move(direction) not in region
    )


# Adjacent pairs of cardinal directions, one per corner of a cell
_CORNERS = (
    (Direction.N, Direction.E),
    (Direction.E, Direction.S),
    (Direction.S, Direction.W),
    (Direction.W, Direction.N),
)


def region_sides(region: Collection[Coordinate]) -> int:
    """
    Number of straight sides on the region's boundary (holes included).

    A polygon has as many sides as corners, so count convex corners (both
    neighbors outside) and concave ones (both inside, diagonal outside).
    """
    corners = 0
    for point in region:
        for first, second in _CORNERS:
            first_in = point.move(first) in region
            second_in = point.move(second) in region
            if not first_in and not second_in:
                corners += 1
            elif first_in and second_in and point.move(first).move(second) not in region:
                corners += 1
    return corners


# =============================================================================
# Cycle Detection
# =============================================================================


@dataclass(frozen=True)
class Cycle(Generic[S]):
    """
    A repeating sequence of states.

    history[i] is the state after i transforms (history[0] is the initial
    state). States from `offset` onwards repeat every `period` steps.
    """

    offset: int
    period: int
    history: tuple[S, ...]

    def state_at(self, iteration: int) -> S:
        """State after `iteration` transforms, without simulating them."""
        if iteration < 0:
            raise ValueError(f"Iteration must be non-negative, got {iteration}")
        if iteration < len(self.history):
            return self.history[iteration]
        return self.history[self.offset + (iteration - self.offset) % self.period]


def _simulate(
    initial: S, transform: Callable[[S], S], steps: int
) -> tuple[list[S], Cycle[S] | None]:
    """Apply `transform` up to `steps` times, stopping at the first repeated state."""
    history: list[S] = [initial]
    first_seen: dict[S, int] = {initial: 0}
    state = initial

    for iteration in range(1, steps + 1):
        state = transform(state)
        if state in first_seen:
            offset = first_seen[state]
            cycle = Cycle(offset, iteration - offset, tuple(history))
            logger.debug("Cycle found: offset=%d period=%d", cycle.offset, cycle.period)
            return history, cycle
        first_seen[state] = iteration
        history.append(state)

    return history, None


def find_cycle(initial: S, transform: Callable[[S], S], max_iterations: int) -> Cycle[S] | None:
    """
    Detect the cycle reached by repeatedly applying `transform`.

    States must be hashable and compare by value. Returns None if no state
    repeats within `max_iterations` transforms.

    Raises:
        ValueError: If max_iterations is negative
    """
    if max_iterations < 0:
        raise ValueError(f"max_iterations must be non-negative, got {max_iterations}")
    _, cycle = _simulate(initial, transform, max_iterations)
    return cycle


def state_after(
    initial: S,
    transform: Callable[[S], S],
    iterations: int,
    max_iterations: int | None = None,
) -> S | None:
    """
    The state after `iterations` transforms, projected through any cycle.

    Simulates at most `max_iterations` transforms (default: `iterations`).
    Returns None if that budget runs out before either reaching
    `iterations` or finding a cycle.

    Raises:
        ValueError: If iterations or max_iterations is negative
    """
    if iterations < 0:
        raise ValueError(f"iterations must be non-negative, got {iterations}")
    if max_iterations is not None and max_iterations < 0:
        raise ValueError(f"max_iterations must be non-negative, got {max_iterations}")

    budget = iterations if max_iterations is None else min(iterations, max_iterations)
    history, cycle = _simulate(initial, transform, budget)
    if cycle is not None:
        return cycle.state_at(iterations)
    if len(history) - 1 == iterations:
        return history[-1]
    return None


# =============================================================================
# Walk Loop Detection
# =============================================================================


# Type alias for the turn rule: returns the heading to leave `point` with,
# or Direction.INVALID to end the walk
TurnRule = Callable[[Grid[T], Coordinate, Direction], Direction]

# Type alias for the step rule: moves from `point` along the chosen heading
StepRule = Callable[[Grid[T], Coordinate, Direction], Coordinate]


@dataclass(frozen=True)
class Walk:
    """Result of tracing a walk across a grid."""

    visited: frozenset[Coordinate]
    looped: bool


def turn_right_at(blocked: Callable[[T], bool]) -> TurnRule:
    """
    Turn rule for a walker that turns right in front of blocked cells.

    The walk ends when the next cell is off the grid or the walker is
    boxed in on all four sides.
    """

    def turn(grid: Grid[T], point: Coordinate, heading: Direction) -> Direction:
        next_heading = heading
        next_point = point.move(next_heading)
        if not grid.exists(next_point):
            return Direction.INVALID
        while blocked(grid.at(next_point)):
            next_heading = next_heading.rotate_right()
            if next_heading == heading:
                return Direction.INVALID
            next_point = point.move(next_heading)
            if not grid.exists(next_point):
                return Direction.INVALID
        return next_heading

    return turn


def _step_forward(grid: Grid, point: Coordinate, heading: Direction) -> Coordinate:
    return point.move(heading)


def trace_walk(
    grid: Grid[T],
    start: Coordinate,
    direction: Direction,
    turn: TurnRule,
    step: StepRule | None = None,
) -> Walk:
    """
    Walk the grid until it ends or loops.

    At each point `turn` picks the heading (Direction.INVALID ends the walk)
    and `step` moves along it (default: one cell forward). A loop is a
    revisit of the same point with the same heading. `turn` must end the
    walk before it leaves the grid, otherwise the walk may never stop.
    """
    if step is None:
        step = _step_forward

    seen: set[tuple[Coordinate, Direction]] = set()
    visited: set[Coordinate] = set()
    point, heading = start, direction

    while True:
        if (point, heading) in seen:
            logger.debug("Walk from %s looped at %s heading %s", start, point, heading.value)
            return Walk(frozenset(visited), True)
        seen.add((point, heading))
        visited.add(point)

        heading = turn(grid, point, heading)
        if heading is Direction.INVALID:
            return Walk(frozenset(visited), False)
        point = step(grid, point, heading)


def walk_loops(
    grid: Grid[T],
    start: Coordinate,
    direction: Direction,
    turn: TurnRule,
    step: StepRule | None = None,
) -> bool:
    """True if the walk described by `turn`/`step` revisits a point with the same heading."""
    return trace_walk(grid, start, direction, turn, step).looped
