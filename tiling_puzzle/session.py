"""Game session: current state, undo/redo history and puzzle progression.

States are immutable. A successful placement builds a new `GameState` and
pushes the old one onto `past`; undo and redo move states between the two
stacks without re-validating them. Nothing here raises for a bad move:
rejections come back as an `Outcome` and are kept as `last_rejection` for
display.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .catalog import CATALOG, PuzzleDefinition, validate_catalog
from .config import SessionConfig
from .grid import Grid, is_complete
from .pieces import Coord, PieceType, PIECES, resolve_cells
from .rules import Outcome, Rejection, OK, check_budget, check_selection, validate

LOGGER = logging.getLogger(__name__)


class Status(str, Enum):
    AWAITING_PLACEMENT = "AwaitingPlacement"
    COMPLETE = "Complete"


@dataclass(frozen=True)
class Move:
    piece_type: PieceType
    row: int
    col: int
    rotation: int = 0
    reflected: bool = False

    @property
    def anchor(self) -> Coord:
        return (self.row, self.col)


@dataclass(frozen=True)
class GameState:
    grid: Grid
    pieces_placed: int = 0
    used_piece_types: Tuple[PieceType, ...] = ()
    moves: Tuple[Move, ...] = ()

    @property
    def last_move(self) -> Optional[Move]:
        return self.moves[-1] if self.moves else None

    @classmethod
    def fresh(cls, puzzle: PuzzleDefinition) -> "GameState":
        return cls(grid=puzzle.new_grid())


@dataclass(frozen=True)
class SessionView:
    """Everything a presentation layer needs to draw the current state."""
    puzzle_index: int
    puzzle: PuzzleDefinition
    grid: Grid
    pieces_placed: int
    max_pieces: int
    status: Status
    last_rejection: Optional[Outcome]
    can_undo: bool
    can_redo: bool
    remaining: Dict[PieceType, Optional[int]]
    last_move: Optional[Move]
    has_next: bool

    @property
    def is_complete(self) -> bool:
        return self.status is Status.COMPLETE


class GameSession:
    def __init__(self, catalog=CATALOG, index: int = 0, config: Optional[SessionConfig] = None):
        self.catalog = validate_catalog(catalog)
        if not 0 <= index < len(self.catalog):
            raise IndexError(f"puzzle index {index} out of range 0..{len(self.catalog) - 1}")
        self.config = config or SessionConfig()
        self.index = index
        self.furthest = index
        self._next_piece_id = 1
        self._start_puzzle(index)

    # -----------------------------
    # State & derived properties
    # -----------------------------

    @property
    def puzzle(self) -> PuzzleDefinition:
        return self.catalog[self.index]

    @property
    def past(self) -> Tuple[GameState, ...]:
        """Oldest first; the last entry is the next undo target."""
        return tuple(self._past)

    @property
    def future(self) -> Tuple[GameState, ...]:
        """Next redo target first."""
        return tuple(reversed(self._future))

    @property
    def is_complete(self) -> bool:
        return is_complete(self.state.grid)

    @property
    def status(self) -> Status:
        return Status.COMPLETE if self.is_complete else Status.AWAITING_PLACEMENT

    @property
    def has_next(self) -> bool:
        return self.index + 1 < len(self.catalog)

    def remaining_for(self, piece_type: PieceType) -> Optional[int]:
        """Pieces of this type still allowed, or None if only the budget limits it."""
        limit = self.puzzle.limit_for(piece_type)
        if limit is None:
            return None
        return max(0, limit - Counter(self.state.used_piece_types)[piece_type])

    def available_types(self) -> List[PieceType]:
        return [t for t in self.puzzle.piece_types if self.remaining_for(t) != 0]

    def view(self) -> SessionView:
        return SessionView(
            puzzle_index=self.index,
            puzzle=self.puzzle,
            grid=self.state.grid,
            pieces_placed=self.state.pieces_placed,
            max_pieces=self.puzzle.max_pieces,
            status=self.status,
            last_rejection=self.last_rejection,
            can_undo=bool(self._past),
            can_redo=bool(self._future),
            remaining={t: self.remaining_for(t) for t in self.puzzle.piece_types},
            last_move=self.state.last_move,
            has_next=self.has_next,
        )

    # -----------------------------
    # Placement
    # -----------------------------

    def preview(self, piece_type: Optional[PieceType], row: int, col: int,
                rotation: Optional[int] = 0, reflected: bool = False) -> Outcome:
        """Run every check for a placement without applying it."""
        puzzle = self.puzzle
        outcome = check_selection(puzzle, piece_type, rotation, reflected)
        if not outcome:
            return outcome
        outcome = check_budget(puzzle, self.state.pieces_placed)
        if not outcome:
            return outcome
        kind = PieceType(piece_type)
        cells = resolve_cells(kind, row, col, rotation, reflected, puzzle.is_small(kind))
        return validate(self.state.grid, cells, puzzle, kind, self.state.used_piece_types)

    def place(self, piece_type: Optional[PieceType], row: int, col: int,
              rotation: Optional[int] = 0, reflected: bool = False) -> Outcome:
        outcome = self.preview(piece_type, row, col, rotation, reflected)
        if not outcome:
            LOGGER.debug("rejected %s at (%d, %d) rot=%s refl=%s: %s",
                         piece_type, row, col, rotation, reflected, outcome.message)
            self.last_rejection = outcome
            return outcome

        kind = PieceType(piece_type)
        reflected = bool(reflected and PIECES[kind].chiral)
        piece_id = self._next_piece_id
        self._next_piece_id += 1
        prev = self.state
        self._commit(GameState(
            grid=prev.grid.with_piece(outcome.cells, piece_id, kind, rotation, reflected),
            pieces_placed=prev.pieces_placed + 1,
            used_piece_types=prev.used_piece_types + (kind,),
            moves=prev.moves + (Move(kind, row, col, rotation, reflected),),
        ))
        LOGGER.debug("placed #%d %s at (%d, %d): %s", piece_id, kind.value, row, col, outcome.cells)
        if self.is_complete:
            LOGGER.info("puzzle %r complete with %d pieces", self.puzzle.name, self.state.pieces_placed)
        return outcome

    def place_move(self, move: Move) -> Outcome:
        return self.place(move.piece_type, move.row, move.col, move.rotation, move.reflected)

    # -----------------------------
    # History
    # -----------------------------

    def undo(self) -> bool:
        if not self._past:
            return False
        self._future.append(self.state)
        self.state = self._past.pop()
        self._touch()
        LOGGER.debug("undo -> %d pieces", self.state.pieces_placed)
        return True

    def redo(self) -> bool:
        if not self._future:
            return False
        self._past.append(self.state)
        self.state = self._future.pop()
        self._touch()
        LOGGER.debug("redo -> %d pieces", self.state.pieces_placed)
        return True

    def reset(self) -> None:
        """Start the current puzzle over. Undoable unless configured otherwise."""
        if self.state.pieces_placed == 0 and not self._future:
            self._touch()
            return
        if not self.config.reset_undoable:
            self._past.clear()
        if self.state.pieces_placed == 0:
            # already fresh; only the redo targets go
            self._future.clear()
            self._touch()
        elif self.config.reset_undoable:
            self._commit(GameState.fresh(self.puzzle))
        else:
            self._future.clear()
            self.state = GameState.fresh(self.puzzle)
            self._touch()
        LOGGER.info("reset puzzle %r", self.puzzle.name)

    # -----------------------------
    # Puzzle progression
    # -----------------------------

    def confirm_password(self, password: Optional[str]) -> Outcome:
        puzzle = self.puzzle
        if not puzzle.requires_password or password == puzzle.password:
            self._password_ok = True
            self.last_rejection = None
            return OK
        LOGGER.info("wrong password for puzzle %r", puzzle.name)
        self._password_ok = False
        return self._reject(Rejection.WRONG_PASSWORD)

    def advance_to_next_puzzle(self) -> Outcome:
        if not self.is_complete:
            return self._reject(Rejection.PUZZLE_INCOMPLETE)
        if not self.has_next:
            return self._reject(Rejection.NO_MORE_PUZZLES)
        if self.puzzle.requires_password and not self._password_ok:
            return self._reject(Rejection.WRONG_PASSWORD, "password required")
        self.index += 1
        self.furthest = max(self.furthest, self.index)
        self._start_puzzle(self.index)
        LOGGER.info("advanced to puzzle %d %r", self.index, self.puzzle.name)
        return OK

    def request_advance(self, password: Optional[str] = None) -> Outcome:
        """Password check (when the puzzle has one) followed by the advance."""
        if not self.is_complete:
            return self._reject(Rejection.PUZZLE_INCOMPLETE)
        if not self.has_next:
            return self._reject(Rejection.NO_MORE_PUZZLES)
        outcome = self.confirm_password(password)
        if not outcome:
            return outcome
        return self.advance_to_next_puzzle()

    def select_puzzle(self, index: int) -> Outcome:
        """Jump to a puzzle already reached in this session."""
        if not 0 <= index < len(self.catalog):
            return self._reject(Rejection.NO_MORE_PUZZLES, f"no puzzle {index + 1}")
        if index > self.furthest:
            return self._reject(Rejection.PUZZLE_INCOMPLETE, "puzzle is still locked")
        self.index = index
        self._start_puzzle(index)
        return OK

    # -----------------------------
    # Internals
    # -----------------------------

    def _start_puzzle(self, index: int) -> None:
        self.state = GameState.fresh(self.catalog[index])
        self._past: List[GameState] = []
        self._future: List[GameState] = []
        self.last_rejection: Optional[Outcome] = None
        self._password_ok = False

    def _commit(self, new_state: GameState) -> None:
        self._past.append(self.state)
        self._future.clear()
        self.state = new_state
        self._touch()

    def _touch(self) -> None:
        self.last_rejection = None
        self._password_ok = False

    def _reject(self, reason: Rejection, detail: str = "") -> Outcome:
        outcome = Outcome.reject(reason, detail)
        self.last_rejection = outcome
        return outcome
