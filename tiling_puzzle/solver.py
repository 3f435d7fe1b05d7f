"""Backtracking solver used for hints and for checking puzzle definitions."""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

from .catalog import PuzzleDefinition
from .grid import Grid
from .pieces import Coord, PieceType, orientation_choices, resolve_cells
from .session import GameSession, Move

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_NODES = 200_000


@dataclass(frozen=True)
class Placement:
    move: Move
    cells: FrozenSet[Coord]


def middle_ok(puzzle: PuzzleDefinition, kind: PieceType, cells: FrozenSet[Coord]) -> bool:
    middle = puzzle.middle
    if middle is None:
        return True
    return (middle in cells) == (kind == puzzle.middle_cell_type)


def placements_for_piece(puzzle: PuzzleDefinition, kind: PieceType, empty: Set[Coord]) -> List[Placement]:
    """All placements of a piece type that fit entirely within 'empty' cells."""
    small = puzzle.is_small(kind)
    res = []
    seen = set()
    for rotation, reflected in orientation_choices(kind, puzzle.allow_rotation, puzzle.allow_reflection):
        # the anchor is itself one of the piece's cells
        for r, c in sorted(empty):
            cells = frozenset(resolve_cells(kind, r, c, rotation, reflected, small))
            if cells in seen or not cells <= empty or not middle_ok(puzzle, kind, cells):
                continue
            seen.add(cells)
            res.append(Placement(Move(kind, r, c, rotation, reflected), cells))
    # Sort by top-left-most cell to get determinism
    res.sort(key=lambda p: sorted(p.cells))
    return res


def solve(puzzle: PuzzleDefinition, grid: Optional[Grid] = None,
          used: Iterable[PieceType] = (), max_solutions: int = 1,
          max_nodes: int = DEFAULT_MAX_NODES) -> List[List[Move]]:
    """Complete tilings from `grid` (default: the empty puzzle grid).

    Each solution is the list of moves still to play. Honors the piece
    budget, per-type caps, the middle cell and orientation permissions.
    Gives up after `max_nodes` search nodes.
    """
    grid = grid or puzzle.new_grid()
    used = list(used)
    empty = frozenset(grid.empty_cells())

    covering: Dict[Coord, List[Placement]] = {cell: [] for cell in empty}
    for kind in puzzle.piece_types:
        for p in placements_for_piece(puzzle, kind, empty):
            for cell in p.cells:
                covering[cell].append(p)

    counts = Counter(used)
    solutions: List[List[Move]] = []
    nodes = 0

    def allowed(p: Placement) -> bool:
        limit = puzzle.limit_for(p.move.piece_type)
        return limit is None or counts[p.move.piece_type] < limit

    def backtrack(empty_cells: FrozenSet[Coord], budget: int, placed: List[Move]):
        nonlocal nodes
        if not empty_cells:
            solutions.append(list(placed))
            return
        nodes += 1
        if nodes > max_nodes or budget <= 0:
            return
        # Heuristic: fill the cell with fewest fitting placements (MRV) to prune faster
        best_opts = None
        for cell in sorted(empty_cells):
            opts = [p for p in covering[cell] if p.cells <= empty_cells and allowed(p)]
            if best_opts is None or len(opts) < len(best_opts):
                best_opts = opts
                if not opts:
                    return
        for p in best_opts:
            counts[p.move.piece_type] += 1
            placed.append(p.move)
            backtrack(empty_cells - p.cells, budget - 1, placed)
            placed.pop()
            counts[p.move.piece_type] -= 1
            if len(solutions) >= max_solutions or nodes > max_nodes:
                return

    backtrack(empty, puzzle.max_pieces - len(used), [])
    if nodes > max_nodes:
        LOGGER.warning("solver gave up on %r after %d nodes", puzzle.name, max_nodes)
    LOGGER.debug("solver found %d solution(s) for %r in %d nodes", len(solutions), puzzle.name, nodes)
    return solutions


def hint(session: GameSession) -> Optional[Move]:
    """Next move of some solution from the session's current state."""
    state = session.state
    solutions = solve(session.puzzle, state.grid, state.used_piece_types,
                      max_nodes=session.config.solver_max_nodes)
    if not solutions or not solutions[0]:
        return None
    return solutions[0][0]
