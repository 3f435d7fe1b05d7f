"""Placement validation.

Every check returns an `Outcome`; nothing here raises for a bad move. The
first failing rule wins, in this order: bounds, occupancy, per-type
allowance, middle cell.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple

from .catalog import PuzzleDefinition
from .grid import Grid, coord_label
from .pieces import ROTATIONS, Coord, PieceType, PIECES

LOGGER = logging.getLogger(__name__)


class Rejection(str, Enum):
    OUT_OF_BOUNDS = "OutOfBounds"
    CELL_OCCUPIED = "CellOccupied"
    BUDGET_EXCEEDED = "BudgetExceeded"
    PIECE_TYPE_EXHAUSTED = "PieceTypeExhausted"
    MIDDLE_CELL_VIOLATION = "MiddleCellViolation"
    NO_PIECE_SELECTED = "NoPieceSelected"
    WRONG_PASSWORD = "WrongPassword"
    PIECE_TYPE_NOT_ALLOWED = "PieceTypeNotAllowed"
    ORIENTATION_NOT_ALLOWED = "OrientationNotAllowed"
    PUZZLE_INCOMPLETE = "PuzzleIncomplete"
    NO_MORE_PUZZLES = "NoMorePuzzles"


MESSAGES = {
    Rejection.OUT_OF_BOUNDS: "Can't place the piece here - out of bounds!",
    Rejection.CELL_OCCUPIED: "Can't place the piece here - space already occupied!",
    Rejection.BUDGET_EXCEEDED: "Maximum number of pieces placed!",
    Rejection.PIECE_TYPE_EXHAUSTED: "No more pieces of this type are available.",
    Rejection.MIDDLE_CELL_VIOLATION: "The middle cell is reserved for one piece type.",
    Rejection.NO_PIECE_SELECTED: "Select a piece first.",
    Rejection.WRONG_PASSWORD: "Wrong password, try again.",
    Rejection.PIECE_TYPE_NOT_ALLOWED: "That piece is not part of this puzzle.",
    Rejection.ORIENTATION_NOT_ALLOWED: "That orientation is not allowed in this puzzle.",
    Rejection.PUZZLE_INCOMPLETE: "Finish the puzzle first.",
    Rejection.NO_MORE_PUZZLES: "That was the last puzzle.",
}


@dataclass(frozen=True)
class Outcome:
    reason: Optional[Rejection] = None
    cells: Tuple[Coord, ...] = ()
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.reason is None

    def __bool__(self) -> bool:
        return self.ok

    @property
    def message(self) -> str:
        if self.reason is None:
            return ""
        base = MESSAGES[self.reason]
        return f"{base} ({self.detail})" if self.detail else base

    @classmethod
    def accept(cls, cells: Iterable[Coord] = ()) -> "Outcome":
        return cls(None, tuple(cells))

    @classmethod
    def reject(cls, reason: Rejection, detail: str = "") -> "Outcome":
        return cls(reason, (), detail)


OK = Outcome()


def check_selection(puzzle: PuzzleDefinition, piece_type: Optional[PieceType],
                    rotation: Optional[int], reflected: bool) -> Outcome:
    """Checks on the requested piece and orientation, before any geometry."""
    if piece_type is None or rotation is None:
        return Outcome.reject(Rejection.NO_PIECE_SELECTED)
    try:
        kind = PieceType(piece_type)
    except ValueError:
        return Outcome.reject(Rejection.PIECE_TYPE_NOT_ALLOWED, str(piece_type))
    if kind not in puzzle.piece_types:
        return Outcome.reject(Rejection.PIECE_TYPE_NOT_ALLOWED, kind.value)
    if rotation not in ROTATIONS:
        return Outcome.reject(Rejection.ORIENTATION_NOT_ALLOWED, f"rotation {rotation}")
    spec = PIECES[kind]
    if not puzzle.allow_rotation and spec.effective_rotation(rotation) != 0:
        return Outcome.reject(Rejection.ORIENTATION_NOT_ALLOWED, "rotation disabled")
    if reflected and spec.chiral and not puzzle.allow_reflection:
        return Outcome.reject(Rejection.ORIENTATION_NOT_ALLOWED, "reflection disabled")
    return OK


def check_budget(puzzle: PuzzleDefinition, pieces_placed: int) -> Outcome:
    if pieces_placed >= puzzle.max_pieces:
        return Outcome.reject(Rejection.BUDGET_EXCEEDED, f"{pieces_placed}/{puzzle.max_pieces}")
    return OK


def validate(grid: Grid, cells: Sequence[Coord], puzzle: PuzzleDefinition,
             piece_type: PieceType, placed_types: Iterable[PieceType] = ()) -> Outcome:
    """Check a resolved cell list against the grid and the puzzle's rules."""
    for r, c in cells:
        if not grid.in_bounds(r, c):
            return Outcome.reject(Rejection.OUT_OF_BOUNDS, f"row {r}, col {c}")

    for r, c in cells:
        cell = grid[r, c]
        if cell.occupied:
            what = "blocked" if cell.blocked else "taken"
            return Outcome.reject(Rejection.CELL_OCCUPIED, f"{coord_label(r, c)} is {what}")

    limit = puzzle.limit_for(piece_type)
    if limit is not None:
        used = Counter(placed_types)[piece_type]
        if used >= limit:
            return Outcome.reject(Rejection.PIECE_TYPE_EXHAUSTED, f"{used}/{limit} {piece_type.value}")

    middle = puzzle.middle
    if middle is not None:
        covers = middle in cells
        if piece_type == puzzle.middle_cell_type and not covers:
            return Outcome.reject(Rejection.MIDDLE_CELL_VIOLATION,
                                  f"{piece_type.value} must cover {coord_label(*middle)}")
        if piece_type != puzzle.middle_cell_type and covers:
            return Outcome.reject(Rejection.MIDDLE_CELL_VIOLATION,
                                  f"{coord_label(*middle)} is reserved")

    return Outcome.accept(cells)
