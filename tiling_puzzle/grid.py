"""Occupancy grid. Grids are immutable; placing a piece returns a new grid."""

from dataclasses import dataclass, replace
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from .pieces import Coord, PieceType


@dataclass(frozen=True)
class Cell:
    occupied: bool = False
    blocked: bool = False
    piece_id: Optional[int] = None
    piece_type: Optional[PieceType] = None
    is_first: bool = False       # anchor cell of its piece
    rotation: int = 0
    reflected: bool = False


EMPTY = Cell()
BLOCKED = Cell(occupied=True, blocked=True)


def coord_label(r: int, c: int) -> str:
    return f"{chr(ord('A')+c)}{r+1}"


@dataclass(frozen=True)
class Grid:
    rows: int
    cols: int
    cells: Tuple[Tuple[Cell, ...], ...]

    def __getitem__(self, rc: Coord) -> Cell:
        r, c = rc
        return self.cells[r][c]

    def in_bounds(self, r: int, c: int) -> bool:
        return 0 <= r < self.rows and 0 <= c < self.cols

    def coords(self) -> Iterator[Coord]:
        for r in range(self.rows):
            for c in range(self.cols):
                yield (r, c)

    def empty_cells(self) -> Set[Coord]:
        return {rc for rc in self.coords() if not self[rc].occupied}

    def blocked_cells(self) -> Set[Coord]:
        return {rc for rc in self.coords() if self[rc].blocked}

    def with_piece(self, cells: Iterable[Coord], piece_id: int, piece_type: PieceType,
                   rotation: int = 0, reflected: bool = False) -> "Grid":
        """Copy of the grid with `cells` claimed by one piece.

        Untouched rows are shared with this grid; both are immutable.
        """
        rows: List[Optional[List[Cell]]] = [None] * self.rows
        for index, (r, c) in enumerate(cells):
            if rows[r] is None:
                rows[r] = list(self.cells[r])
            rows[r][c] = Cell(occupied=True, piece_id=piece_id, piece_type=piece_type,
                              is_first=index == 0, rotation=rotation, reflected=reflected)
        return replace(self, cells=tuple(
            tuple(row) if row is not None else self.cells[r]
            for r, row in enumerate(rows)
        ))


def create_grid(rows: int, cols: int, blocked: Iterable[Coord] = ()) -> Grid:
    """Fresh grid; `blocked` cells start (and stay) occupied."""
    blocked = set(blocked)
    return Grid(rows, cols, tuple(
        tuple(BLOCKED if (r, c) in blocked else EMPTY for c in range(cols))
        for r in range(rows)
    ))


def is_complete(grid: Grid) -> bool:
    return all(cell.occupied for row in grid.cells for cell in row)


def middle_cell(rows: int, cols: int) -> Coord:
    return (rows // 2, cols // 2)
