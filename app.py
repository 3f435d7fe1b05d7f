import streamlit as st
import pandas as pd

from tiling_puzzle import (
    CATALOG, GameSession, PIECES, SessionConfig,
    configure_logging, coord_label, hint, orientation_choices,
)

PIECE_COLORS = ["🟥", "🟦", "🟩", "🟨", "🟪", "🟧", "🟫"]

# -----------------------------
# UI helpers
# -----------------------------

def piece_symbol(piece_id: int) -> str:
    return PIECE_COLORS[piece_id % len(PIECE_COLORS)]

def render_grid_interactive(session: GameSession):
    """Render the grid with clickable cells. Clicking places the selected piece there."""
    view = session.view()
    last = view.last_move.anchor if view.last_move else None
    middle = view.puzzle.middle

    cell_size_css = """
    <style>
    .cell-btn { width: 42px !important; height: 42px !important; padding: 0 !important; }
    </style>
    """
    st.markdown(cell_size_css, unsafe_allow_html=True)

    for r in range(view.grid.rows):
        cols = st.columns(view.grid.cols, gap="small")
        for c in range(view.grid.cols):
            cell = view.grid[r, c]
            label = " "
            if cell.blocked:
                label = "⛔"
            elif cell.occupied:
                label = piece_symbol(cell.piece_id)
            elif (r, c) == middle:
                label = "✳️"
            if (r, c) == last:
                label = f"**{label}**"
            clicked = cols[c].button(label, key=f"cell_{r}_{c}", help=coord_label(r, c),
                                     use_container_width=True)
            if clicked:
                outcome = session.place(st.session_state.selected_piece, r, c,
                                        st.session_state.rotation, st.session_state.reflected)
                if not outcome:
                    st.toast(f"❌ {outcome.message}")
                st.rerun()

def render_piece_palette(session: GameSession):
    st.write("### Pieces")
    view = session.view()
    cols = st.columns(3, gap="small")
    for i, kind in enumerate(view.puzzle.piece_types):
        with cols[i % 3]:
            left = view.remaining[kind]
            left_txt = "∞" if left is None else str(left)
            size = PIECES[kind].size(view.puzzle.is_small(kind))
            st.write(f"**{kind.label}** ({size}) – left: {left_txt}")
            if st.button(f"🎯 Select {kind.value}", key=f"sel_{kind.value}", disabled=left == 0):
                st.session_state.selected_piece = kind
                st.session_state.rotation = 0
                st.session_state.reflected = False
                st.rerun()

def render_selected_piece_controls(session: GameSession):
    kind = st.session_state.selected_piece
    if not kind:
        return
    puzzle = session.puzzle
    choices = orientation_choices(kind, puzzle.allow_rotation, puzzle.allow_reflection)
    rotations = sorted({r for r, _ in choices})
    st.write(f"#### Selected: **{kind.label}** – {st.session_state.rotation}°"
             f"{' (reflected)' if st.session_state.reflected else ''}")
    cols = st.columns(3)
    if len(rotations) > 1 and cols[0].button("⟳ Rotate", key="rotate"):
        i = rotations.index(st.session_state.rotation) if st.session_state.rotation in rotations else 0
        st.session_state.rotation = rotations[(i + 1) % len(rotations)]
        st.rerun()
    if any(m for _, m in choices) and cols[1].button("⇋ Reflect", key="flip"):
        st.session_state.reflected = not st.session_state.reflected
        st.rerun()
    if cols[2].button("❌ Deselect", key="deselect"):
        st.session_state.selected_piece = None
        st.rerun()

def render_move_log(session: GameSession):
    moves = session.state.moves
    if not moves:
        return
    df = pd.DataFrame({
        "piece": [m.piece_type.value for m in moves],
        "anchor": [coord_label(m.row, m.col) for m in moves],
        "rotation": [m.rotation for m in moves],
        "reflected": [m.reflected for m in moves],
    })
    df.index = range(1, len(df) + 1)
    st.dataframe(df, use_container_width=True)

def reset_everything():
    config = SessionConfig()
    configure_logging(config)
    st.session_state.session = GameSession(CATALOG, config=config)
    st.session_state.selected_piece = None
    st.session_state.rotation = 0
    st.session_state.reflected = False

# -----------------------------
# Streamlit App
# -----------------------------

st.set_page_config(page_title="Tiling Puzzle", layout="wide")
st.title("🧩 Tiling Puzzle")

# Init session state
if "session" not in st.session_state:
    reset_everything()

session: GameSession = st.session_state.session
view = session.view()

st.subheader(f"{view.puzzle_index + 1}. {view.puzzle.name}")
st.caption(view.puzzle.description)

left, right = st.columns([2, 1], gap="large")

with left:
    if view.last_rejection is not None:
        st.error(view.last_rejection.message)
    if view.is_complete:
        st.success("Puzzle Complete! 🎉")

    render_grid_interactive(session)
    st.write(f"**Pieces placed:** {view.pieces_placed} / {view.max_pieces}")

    bcols = st.columns(4)
    if bcols[0].button("↶ Undo", disabled=not view.can_undo):
        session.undo(); st.rerun()
    if bcols[1].button("🔁 Reset"):
        session.reset(); st.rerun()
    if bcols[2].button("↷ Redo", disabled=not view.can_redo):
        session.redo(); st.rerun()
    if bcols[3].button("💡 Hint", disabled=view.is_complete):
        move = hint(session)
        if move is None:
            st.toast("No solution from here. Try undoing a few moves.")
        else:
            st.toast(f"Try {move.piece_type.label} at {coord_label(move.row, move.col)}, "
                     f"{move.rotation}°{' reflected' if move.reflected else ''}")

    if view.is_complete and view.has_next:
        st.divider()
        password = None
        if view.puzzle.requires_password:
            password = st.text_input("Password for the next puzzle", type="password")
        if st.button("➡️ Next puzzle"):
            outcome = session.request_advance(password)
            if outcome:
                st.session_state.selected_piece = None
            st.rerun()

with right:
    st.subheader("Piece palette & controls")
    render_piece_palette(session)
    st.divider()
    render_selected_piece_controls(session)
    st.divider()
    st.write("### Moves")
    render_move_log(session)
    if session.furthest > 0:
        st.divider()
        names = [f"{i + 1}. {p.name}" for i, p in enumerate(session.catalog[:session.furthest + 1])]
        choice = st.selectbox("Replay an unlocked puzzle", names, index=session.index)
        if names.index(choice) != session.index:
            session.select_puzzle(names.index(choice))
            st.session_state.selected_piece = None
            st.rerun()
