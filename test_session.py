"""
Game session: placement, undo/redo history, reset and puzzle progression.
"""

import pytest

from tiling_puzzle import (
    CATALOG, GameSession, PieceType, PuzzleDefinition, Rejection, SessionConfig, Status,
)
from tiling_puzzle.catalog import CatalogError

DOMINO_6 = PuzzleDefinition("domino", "", rows=6, cols=6, max_pieces=18,
                            piece_types=(PieceType.DOMINO_HORIZONTAL, PieceType.DOMINO_VERTICAL))
T_8 = PuzzleDefinition("t", "", rows=8, cols=8, max_pieces=16, password="open sesame")
PINWHEEL_5 = PuzzleDefinition(
    "pinwheel", "", rows=5, cols=5, max_pieces=9,
    piece_types=(PieceType.STRAIGHT, PieceType.SQUARE),
    type_limits={PieceType.STRAIGHT: 8, PieceType.SQUARE: 1},
    middle_cell_type=PieceType.SQUARE,
    small_variants=frozenset({PieceType.STRAIGHT, PieceType.SQUARE}),
)
TINY = PuzzleDefinition("tiny", "", rows=1, cols=2, max_pieces=1,
                        piece_types=(PieceType.DOMINO_HORIZONTAL,))

# Four T pieces tile a 4x4 block; four blocks tile the 8x8 grid.
T_BLOCK = [(0, 1, 0), (1, 3, 90), (3, 2, 180), (2, 0, 270)]
T_TILING = [(r + dr, c + dc, rot) for dr, dc in [(0, 0), (0, 4), (4, 0), (4, 4)] for r, c, rot in T_BLOCK]


def fill_t_grid(session):
    for r, c, rot in T_TILING:
        assert session.place(PieceType.T, r, c, rot).ok
    return session


def snapshot(session):
    return (session.state.grid, session.state.pieces_placed, session.state.used_piece_types)


def test_scenario_horizontal_domino():
    session = GameSession([DOMINO_6])
    outcome = session.place(PieceType.DOMINO_HORIZONTAL, 0, 0)
    assert outcome.ok
    assert set(outcome.cells) == {(0, 0), (0, 1)}
    assert session.state.pieces_placed == 1
    grid = session.state.grid
    assert grid[0, 0].occupied and grid[0, 1].occupied
    assert grid[0, 0].piece_id == grid[0, 1].piece_id
    assert grid[0, 0].is_first and not grid[0, 1].is_first


def test_scenario_vertical_domino_out_of_bounds():
    session = GameSession([DOMINO_6])
    session.place(PieceType.DOMINO_HORIZONTAL, 0, 0)
    before = snapshot(session)
    past = session.past
    outcome = session.place(PieceType.DOMINO_VERTICAL, 5, 0)
    assert outcome.reason is Rejection.OUT_OF_BOUNDS
    assert snapshot(session) == before
    assert session.past == past
    assert session.last_rejection == outcome


def test_scenario_t_overlap():
    session = GameSession([T_8])
    outcome = session.place(PieceType.T, 0, 1, 0)
    assert set(outcome.cells) == {(0, 1), (1, 1), (0, 0), (0, 2)}
    outcome = session.place(PieceType.T, 1, 0, 270)
    assert outcome.reason is Rejection.CELL_OCCUPIED


def test_scenario_sixteen_t_pieces_complete():
    session = fill_t_grid(GameSession([T_8]))
    assert session.is_complete
    assert session.status is Status.COMPLETE
    assert session.state.pieces_placed == 16
    ids = {session.state.grid[rc].piece_id for rc in session.state.grid.coords()}
    assert len(ids) == 16


def test_scenario_undo_redo_after_completion():
    session = fill_t_grid(GameSession([T_8]))
    done = session.state
    assert session.undo()
    assert session.state.pieces_placed == 15
    assert not session.is_complete
    assert session.status is Status.AWAITING_PLACEMENT
    assert len(session.future) == 1
    assert session.redo()
    assert session.state == done
    assert session.state is done
    assert session.is_complete


def test_scenario_middle_cell():
    session = GameSession([PINWHEEL_5])
    outcome = session.place(PieceType.STRAIGHT, 2, 0, 0)
    assert outcome.reason is Rejection.MIDDLE_CELL_VIOLATION
    outcome = session.place(PieceType.SQUARE, 2, 2)
    assert outcome.ok
    assert outcome.cells == ((2, 2),)


def test_pinwheel_tiling_completes():
    session = GameSession([PINWHEEL_5])
    moves = [(0, 0, 0), (1, 0, 0), (0, 3, 90), (0, 4, 90),
             (3, 2, 0), (4, 2, 0), (2, 0, 90), (2, 1, 90)]
    for r, c, rot in moves:
        assert session.place(PieceType.STRAIGHT, r, c, rot).ok
    assert session.remaining_for(PieceType.STRAIGHT) == 0
    assert session.available_types() == [PieceType.SQUARE]
    assert session.place(PieceType.SQUARE, 2, 2).ok
    assert session.is_complete


def test_rejection_leaves_everything_untouched():
    session = GameSession([T_8])
    session.place(PieceType.T, 0, 1, 0)
    session.place(PieceType.T, 4, 4, 0)
    session.undo()
    before = (snapshot(session), session.past, session.future)
    for args in [(None, 0, 0), (PieceType.L, 3, 3), (PieceType.T, 3, 3, 45),
                 (PieceType.T, 0, 0, 0), (PieceType.T, 7, 7, 0)]:
        assert not session.place(*args)
        assert (snapshot(session), session.past, session.future) == before


def test_future_cleared_by_new_placement():
    session = GameSession([T_8])
    session.place(PieceType.T, 0, 1, 0)
    session.place(PieceType.T, 0, 5, 0)
    session.undo()
    assert session.future
    assert session.place(PieceType.T, 4, 4, 0).ok
    assert session.future == ()


def test_undo_redo_on_empty_stacks_are_noops():
    session = GameSession([T_8])
    state = session.state
    assert session.undo() is False
    assert session.redo() is False
    assert session.state is state


def test_history_replays_visit_order():
    session = GameSession([T_8])
    visited = [session.state]
    for r, c, rot in T_TILING[:3]:
        session.place(PieceType.T, r, c, rot)
        visited.append(session.state)
    session.undo()
    session.undo()
    assert list(session.past) + [session.state] + list(session.future) == visited


def test_history_snapshots_never_change():
    session = GameSession([T_8])
    session.place(PieceType.T, 0, 1, 0)
    first = session.state
    grid_cells = first.grid.cells
    session.place(PieceType.T, 4, 4, 0)
    assert first.grid.cells is grid_cells
    assert not first.grid[4, 4].occupied


def test_budget_exceeded():
    session = GameSession([PuzzleDefinition("b", "", rows=8, cols=8, max_pieces=1)])
    assert session.place(PieceType.T, 0, 1, 0).ok
    assert session.place(PieceType.T, 4, 4, 0).reason is Rejection.BUDGET_EXCEEDED


def test_completed_puzzle_rejects_more_pieces():
    session = GameSession([TINY])
    assert session.place(PieceType.DOMINO_HORIZONTAL, 0, 0).ok
    assert session.is_complete
    assert not session.place(PieceType.DOMINO_HORIZONTAL, 0, 0)


def test_piece_ids_are_never_reused():
    session = GameSession([T_8])
    session.place(PieceType.T, 0, 1, 0)
    session.undo()
    session.place(PieceType.T, 0, 1, 0)
    assert session.state.grid[0, 1].piece_id == 2


def test_reflection_recorded_only_for_chiral_pieces():
    puzzle = PuzzleDefinition("mix", "", rows=6, cols=6, max_pieces=9,
                              piece_types=(PieceType.T, PieceType.L))
    session = GameSession([puzzle])
    session.place(PieceType.T, 0, 1, 0, True)
    session.place(PieceType.L, 2, 4, 0, True)
    assert session.state.grid[0, 1].reflected is False
    assert session.state.grid[2, 4].reflected is True
    assert session.state.grid[4, 3].occupied
    assert session.state.last_move.piece_type is PieceType.L


def test_reset_is_undoable_by_default():
    session = GameSession([T_8])
    session.place(PieceType.T, 0, 1, 0)
    placed = session.state
    session.reset()
    assert session.state.pieces_placed == 0
    assert session.state.used_piece_types == ()
    assert session.past[-1] is placed
    assert session.future == ()
    assert session.undo()
    assert session.state is placed


def test_reset_not_undoable_when_configured():
    session = GameSession([T_8], config=SessionConfig(reset_undoable=False))
    session.place(PieceType.T, 0, 1, 0)
    session.reset()
    assert session.past == () and session.future == ()
    assert session.state.pieces_placed == 0


def test_reset_of_fresh_state_adds_no_history():
    session = GameSession([T_8])
    session.reset()
    assert session.past == ()


def test_reset_after_undo_drops_redo_history():
    session = GameSession([T_8])
    session.place(PieceType.T, 0, 1, 0)
    session.undo()
    session.reset()
    assert session.future == ()
    assert session.redo() is False
    assert session.state.pieces_placed == 0
    assert session.past == ()


def test_reset_after_undo_not_undoable_clears_both_stacks():
    session = GameSession([T_8], config=SessionConfig(reset_undoable=False))
    session.place(PieceType.T, 0, 1, 0)
    session.place(PieceType.T, 0, 5, 0)
    session.undo()
    session.undo()
    session.reset()
    assert session.past == () and session.future == ()
    assert session.redo() is False


def test_advance_requires_completion():
    session = GameSession([TINY, T_8])
    outcome = session.request_advance()
    assert outcome.reason is Rejection.PUZZLE_INCOMPLETE
    assert session.index == 0


def test_advance_to_next_puzzle_clears_session_state():
    session = GameSession([TINY, T_8])
    session.place(PieceType.DOMINO_HORIZONTAL, 0, 0)
    assert session.request_advance().ok
    assert session.index == 1
    assert session.puzzle is T_8
    assert session.state.pieces_placed == 0
    assert session.past == () and session.future == ()
    assert session.status is Status.AWAITING_PLACEMENT


def test_password_gate():
    gated = PuzzleDefinition("gated", "", rows=1, cols=2, max_pieces=1,
                             piece_types=(PieceType.DOMINO_HORIZONTAL,), password="tile")
    session = GameSession([gated, TINY])
    session.place(PieceType.DOMINO_HORIZONTAL, 0, 0)
    state = session.state

    outcome = session.request_advance("tiles")
    assert outcome.reason is Rejection.WRONG_PASSWORD
    assert session.index == 0 and session.state is state

    assert session.advance_to_next_puzzle().reason is Rejection.WRONG_PASSWORD
    assert session.confirm_password("tile").ok
    assert session.advance_to_next_puzzle().ok
    assert session.index == 1


def test_password_confirmation_cleared_by_undo():
    gated = PuzzleDefinition("gated", "", rows=1, cols=2, max_pieces=1,
                             piece_types=(PieceType.DOMINO_HORIZONTAL,), password="tile")
    session = GameSession([gated, TINY])
    session.place(PieceType.DOMINO_HORIZONTAL, 0, 0)
    session.confirm_password("tile")
    session.undo()
    session.redo()
    assert session.advance_to_next_puzzle().reason is Rejection.WRONG_PASSWORD


def test_last_puzzle_has_no_next():
    session = GameSession([TINY])
    session.place(PieceType.DOMINO_HORIZONTAL, 0, 0)
    assert session.request_advance().reason is Rejection.NO_MORE_PUZZLES


def test_select_puzzle_only_unlocked():
    session = GameSession([TINY, T_8])
    assert session.select_puzzle(1).reason is Rejection.PUZZLE_INCOMPLETE
    session.place(PieceType.DOMINO_HORIZONTAL, 0, 0)
    session.request_advance()
    assert session.select_puzzle(0).ok
    assert session.index == 0 and session.state.pieces_placed == 0
    assert session.select_puzzle(5).reason is Rejection.NO_MORE_PUZZLES
    assert session.select_puzzle(-1).reason is Rejection.NO_MORE_PUZZLES
    assert session.index == 0


def test_view_exposes_rendered_state():
    session = GameSession([PINWHEEL_5])
    session.place(PieceType.STRAIGHT, 2, 0, 0)
    view = session.view()
    assert view.last_rejection.reason is Rejection.MIDDLE_CELL_VIOLATION
    assert view.pieces_placed == 0 and view.max_pieces == 9
    assert view.remaining == {PieceType.STRAIGHT: 8, PieceType.SQUARE: 1}
    assert not view.can_undo and not view.can_redo
    assert view.puzzle.middle == (2, 2)
    assert not view.is_complete

    session.place(PieceType.SQUARE, 2, 2)
    view = session.view()
    assert view.last_rejection is None
    assert view.can_undo
    assert view.last_move.anchor == (2, 2)
    assert view.grid[2, 2].piece_type is PieceType.SQUARE


def test_default_catalog_and_bad_construction():
    session = GameSession()
    assert session.puzzle is CATALOG[0]
    with pytest.raises(IndexError):
        GameSession([TINY], index=1)
    with pytest.raises(CatalogError):
        GameSession([])
    with pytest.raises(CatalogError):
        GameSession([TINY, TINY])
