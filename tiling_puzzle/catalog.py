"""Puzzle definitions and the built-in, ordered puzzle catalog."""

import logging
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Tuple

from .grid import Grid, create_grid, middle_cell
from .pieces import Coord, PieceType

LOGGER = logging.getLogger(__name__)


class CatalogError(ValueError):
    """A puzzle definition that cannot be played."""


@dataclass(frozen=True)
class PuzzleDefinition:
    name: str
    description: str
    rows: int
    cols: int
    max_pieces: int
    piece_types: Tuple[PieceType, ...] = (PieceType.T,)
    blocked: FrozenSet[Coord] = frozenset()
    password: Optional[str] = None
    one_use_per_type: bool = False
    type_limits: Tuple[Tuple[PieceType, int], ...] = ()   # (type, cap) pairs; a dict is accepted
    middle_cell_type: Optional[PieceType] = None   # enables the middle-cell rule
    small_variants: FrozenSet[PieceType] = frozenset()
    allow_rotation: bool = True
    allow_reflection: bool = True

    def __post_init__(self):
        # normalize to hashable, read-only containers
        limits = self.type_limits.items() if isinstance(self.type_limits, dict) else self.type_limits
        object.__setattr__(self, "type_limits", tuple(sorted(limits, key=lambda kv: kv[0].value)))
        object.__setattr__(self, "piece_types", tuple(self.piece_types))
        object.__setattr__(self, "blocked", frozenset(self.blocked))
        object.__setattr__(self, "small_variants", frozenset(self.small_variants))
        if self.rows <= 0 or self.cols <= 0:
            raise CatalogError(f"{self.name}: grid must be at least 1x1, got {self.rows}x{self.cols}")
        if self.max_pieces <= 0:
            raise CatalogError(f"{self.name}: max_pieces must be positive")
        if not self.piece_types:
            raise CatalogError(f"{self.name}: no piece types enabled")
        for r, c in self.blocked:
            if not (0 <= r < self.rows and 0 <= c < self.cols):
                raise CatalogError(f"{self.name}: blocked cell {(r, c)} is off the grid")
        for kind, limit in self.type_limits:
            if kind not in self.piece_types:
                raise CatalogError(f"{self.name}: limit given for disabled type {kind.value}")
            if limit < 0:
                raise CatalogError(f"{self.name}: negative limit for {kind.value}")
        if self.middle_cell_type is not None:
            if self.middle_cell_type not in self.piece_types:
                raise CatalogError(f"{self.name}: middle-cell type {self.middle_cell_type.value} is not enabled")
            if self.middle in self.blocked:
                raise CatalogError(f"{self.name}: middle cell is blocked")

    @property
    def requires_password(self) -> bool:
        return self.password is not None

    @property
    def middle(self) -> Optional[Coord]:
        if self.middle_cell_type is None:
            return None
        return middle_cell(self.rows, self.cols)

    def is_small(self, kind: PieceType) -> bool:
        return kind in self.small_variants

    def limit_for(self, kind: PieceType) -> Optional[int]:
        """Per-type cap, or None when only the overall budget applies."""
        if self.one_use_per_type:
            return 1
        return dict(self.type_limits).get(kind)

    def new_grid(self) -> Grid:
        return create_grid(self.rows, self.cols, self.blocked)


# -----------------------------
# Built-in catalog
# -----------------------------

CATALOG: Tuple[PuzzleDefinition, ...] = (
    PuzzleDefinition(
        name="T square",
        description="Fill the 8×8 grid with 16 T tetrominoes. "
                    "Each piece can be rotated 0°, 90°, 180° or 270°.",
        rows=8, cols=8, max_pieces=16,
    ),
    PuzzleDefinition(
        name="Domino field",
        description="Cover the 6×6 grid with 18 dominoes, horizontal or vertical.",
        rows=6, cols=6, max_pieces=18,
        piece_types=(PieceType.DOMINO_HORIZONTAL, PieceType.DOMINO_VERTICAL),
        allow_rotation=False,
    ),
    PuzzleDefinition(
        name="Pinwheel",
        description="Use at most 8 straight trominoes and a single square. "
                    "The single square must sit in the middle cell; nothing else may.",
        rows=5, cols=5, max_pieces=9,
        piece_types=(PieceType.STRAIGHT, PieceType.SQUARE),
        type_limits={PieceType.STRAIGHT: 8, PieceType.SQUARE: 1},
        middle_cell_type=PieceType.SQUARE,
        small_variants=frozenset({PieceType.STRAIGHT, PieceType.SQUARE}),
        password="pinwheel",
    ),
    PuzzleDefinition(
        name="One of each",
        description="Place each of the five tetrominoes exactly once around the blocked cells.",
        rows=5, cols=5, max_pieces=5,
        piece_types=(PieceType.STRAIGHT, PieceType.T, PieceType.SQUARE, PieceType.L, PieceType.SKEW),
        blocked=frozenset({(0, 4), (2, 2), (3, 0), (3, 3), (4, 2)}),
        one_use_per_type=True,
    ),
    PuzzleDefinition(
        name="L box",
        description="Fill the 4×4 box with four L pieces. Rotate and reflect as needed.",
        rows=4, cols=4, max_pieces=4,
        piece_types=(PieceType.L,),
    ),
)


def get_puzzle(index: int, catalog: Tuple[PuzzleDefinition, ...] = CATALOG) -> PuzzleDefinition:
    return catalog[index]


def find_puzzle(name: str, catalog: Tuple[PuzzleDefinition, ...] = CATALOG) -> PuzzleDefinition:
    for puzzle in catalog:
        if puzzle.name.lower() == name.lower():
            return puzzle
    raise KeyError(name)


def validate_catalog(catalog) -> Tuple[PuzzleDefinition, ...]:
    """Freeze a catalog into a tuple, rejecting empty or duplicate-named ones."""
    catalog = tuple(catalog)
    if not catalog:
        raise CatalogError("catalog is empty")
    names: List[str] = [p.name for p in catalog]
    dupes = {n for n in names if names.count(n) > 1}
    if dupes:
        raise CatalogError(f"duplicate puzzle names: {sorted(dupes)}")
    LOGGER.debug("catalog with %d puzzles: %s", len(catalog), names)
    return catalog
