from .pieces import (
    PIECES, ROTATIONS, Coord, PieceSpec, PieceType,
    orientation_choices, orientation_shapes, resolve_cells,
)
from .grid import Cell, Grid, coord_label, create_grid, is_complete, middle_cell
from .catalog import CATALOG, CatalogError, PuzzleDefinition, find_puzzle, get_puzzle
from .rules import Outcome, Rejection, validate
from .config import SessionConfig, configure_logging
from .session import GameSession, GameState, Move, SessionView, Status
from .solver import hint, solve
