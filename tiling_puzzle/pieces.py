"""Piece catalogue and the geometry resolver."""

from enum import Enum
from typing import Dict, FrozenSet, List, Set, Tuple
from dataclasses import dataclass

# -----------------------------
# Piece definitions & geometry
# -----------------------------

Coord = Tuple[int, int]

ROTATIONS = (0, 90, 180, 270)


class PieceType(str, Enum):
    DOMINO_HORIZONTAL = "domino-horizontal"
    DOMINO_VERTICAL = "domino-vertical"
    T = "T"
    SQUARE = "square"
    STRAIGHT = "straight"
    L = "L"
    SKEW = "skew"

    @property
    def label(self) -> str:
        return PIECES[self].label


def normalize(shape: Set[Coord]) -> Set[Coord]:
    min_r = min(r for r, c in shape)
    min_c = min(c for r, c in shape)
    return {(r - min_r, c - min_c) for (r, c) in shape}


@dataclass(frozen=True)
class PieceSpec:
    kind: PieceType
    label: str                    # human-readable
    offsets: Tuple[Coord, ...]    # rotation 0, anchor first at (0, 0)
    small_offsets: Tuple[Coord, ...]  # reduced variant; same as offsets if none
    distinct_rotations: int       # 1, 2 or 4
    chiral: bool                  # reflection produces a different shape

    def shape(self, small: bool = False) -> Tuple[Coord, ...]:
        return self.small_offsets if small else self.offsets

    def size(self, small: bool = False) -> int:
        return len(self.shape(small))

    def effective_rotation(self, rotation: int) -> int:
        return rotation % (90 * self.distinct_rotations)


# Anchor is always offset (0, 0). For the T it is the centre of the bar with
# the stem pointing down; for the L it is the top of the long bar; for the
# skew it is the left cell of the upper pair.
PIECES: Dict[PieceType, PieceSpec] = {
    spec.kind: spec
    for spec in [
        PieceSpec(PieceType.DOMINO_HORIZONTAL, "Domino (horizontal)",
                  ((0, 0), (0, 1)), ((0, 0), (0, 1)), 1, False),
        PieceSpec(PieceType.DOMINO_VERTICAL, "Domino (vertical)",
                  ((0, 0), (1, 0)), ((0, 0), (1, 0)), 1, False),
        PieceSpec(PieceType.T, "T tetromino",
                  ((0, 0), (1, 0), (0, -1), (0, 1)),
                  ((0, 0), (1, 0), (0, -1), (0, 1)), 4, False),
        PieceSpec(PieceType.SQUARE, "Square",
                  ((0, 0), (0, 1), (1, 0), (1, 1)), ((0, 0),), 1, False),
        PieceSpec(PieceType.STRAIGHT, "Straight",
                  ((0, 0), (0, 1), (0, 2), (0, 3)), ((0, 0), (0, 1), (0, 2)), 2, False),
        PieceSpec(PieceType.L, "L tetromino",
                  ((0, 0), (1, 0), (2, 0), (2, 1)),
                  ((0, 0), (1, 0), (2, 0), (2, 1)), 4, True),
        PieceSpec(PieceType.SKEW, "Skew tetromino",
                  ((0, 0), (0, 1), (1, -1), (1, 0)),
                  ((0, 0), (0, 1), (1, -1), (1, 0)), 2, True),
    ]
}


def transform(offsets, rotation: int, reflected: bool) -> List[Coord]:
    """Mirror (optional) then rotate clockwise about the anchor, keeping order."""
    out = []
    for dr, dc in offsets:
        if reflected:
            dc = -dc
        for _ in range(rotation // 90):
            dr, dc = dc, -dr
        out.append((dr, dc))
    return out


def resolve_cells(piece_type: PieceType, anchor_row: int, anchor_col: int,
                  rotation: int = 0, reflected: bool = False,
                  small: bool = False) -> List[Coord]:
    """Grid cells covered by a piece; anchor first. No bounds checking.

    `small` selects the reduced variant (single-cell square, straight
    tromino) for puzzles that use it.
    """
    spec = PIECES[PieceType(piece_type)]
    rot = spec.effective_rotation(rotation)
    mirror = reflected and spec.chiral
    return [(anchor_row + dr, anchor_col + dc)
            for dr, dc in transform(spec.shape(small), rot, mirror)]


def orientation_shapes(piece_type: PieceType, small: bool = False,
                       allow_reflection: bool = True) -> List[FrozenSet[Coord]]:
    """Normalized shapes reachable through resolve_cells, deduplicated."""
    spec = PIECES[PieceType(piece_type)]
    mirrors = (False, True) if (spec.chiral and allow_reflection) else (False,)
    seen = set()
    for reflected in mirrors:
        for rotation in ROTATIONS:
            cells = resolve_cells(piece_type, 0, 0, rotation, reflected, small)
            seen.add(frozenset(normalize(set(cells))))
    return sorted(seen, key=lambda sh: sorted(sh))


def orientation_choices(piece_type: PieceType, allow_rotation: bool = True,
                        allow_reflection: bool = True) -> List[Tuple[int, bool]]:
    """(rotation, reflected) pairs that yield distinct orientations."""
    spec = PIECES[PieceType(piece_type)]
    rotations = list(ROTATIONS[:spec.distinct_rotations]) if allow_rotation else [0]
    mirrors = [False, True] if (spec.chiral and allow_reflection) else [False]
    return [(r, m) for m in mirrors for r in rotations]
