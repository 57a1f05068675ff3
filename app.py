# app.py
# Run:
#   streamlit run app.py
#
# Notes:
# - State lives in data/habit_tree.db (override with HABIT_TREE_DB).
# - Every action saves to the DB before anything is drawn, so closing the
#   tab mid-render never loses a completion.

import logging

import streamlit as st

from app_utils import config, storage
from app_utils.goals import leaves_to_next_flower, parse_flower_threshold
from app_utils.logger import setup_logger
from app_utils.plots import history_chart, tree_figure
from features.exceptions import NothingToUndo
from features.habits import (
    apply_load_decay,
    complete,
    set_flower_threshold,
    summarize,
    today_key,
    undo_last,
)
from features.insights import completion_frame, longest_streak, week_summary

# =========================
# 0) APP CONFIG + THEME
# =========================
st.set_page_config(page_title="Habit Tree", layout="centered", page_icon="🌳")

setup_logger()
logger = logging.getLogger("habit_tree.app")

CUSTOM_CSS = """
<style>
.block-container {padding-top: 1.2rem; padding-bottom: 2rem; max-width: 900px;}
h1, h2, h3 {letter-spacing: -0.02em;}
.card {
  border: 1px solid rgba(0,0,0,0.08);
  background: rgba(63,155,79,0.05);
  border-radius: 18px;
  padding: 16px 16px;
}
.small {opacity: 0.85; font-size: 0.92rem;}
.badge {
  display:inline-block;
  padding: 4px 10px;
  border-radius: 999px;
  background: rgba(63,155,79,0.15);
  border: 1px solid rgba(63,155,79,0.35);
  font-size: 0.85rem;
}
</style>
"""
st.markdown(CUSTOM_CSS, unsafe_allow_html=True)

# =========================
# 1) STATE + LOAD-TIME DECAY
# =========================
storage.init_db()

def load_today():
    """Read state from the DB and apply decay for missed days."""
    today = today_key()
    state = storage.load_state()
    decayed, removed = apply_load_decay(state, today)
    if decayed is not state:
        storage.save_state(decayed)
    if removed:
        st.session_state["flash"] = ("warning", f"{removed} leaf/leaves fell off while you were away.")
    return decayed, today

# =========================
# 2) ACTIONS (run as button callbacks, before the rerun draws)
# =========================
def on_complete():
    state, today = load_today()
    new_state, changed = complete(state, today)
    if not changed:
        st.session_state["flash"] = ("toast", "Already completed today 🌿")
        return
    storage.save_state(new_state)
    st.session_state["flash"] = ("success", "Nice! A new leaf grew.")

def on_undo():
    state, _ = load_today()
    try:
        new_state = undo_last(state)
    except NothingToUndo as e:
        st.session_state["flash"] = ("warning", str(e))
        return
    storage.save_state(new_state)
    st.session_state["flash"] = ("info", "Last completion removed.")

def on_threshold_change():
    state, _ = load_today()
    n = parse_flower_threshold(st.session_state.get("flower_input"), default=config.DEFAULT_FLOWER_EVERY)
    storage.save_state(set_flower_threshold(state, n))
    logger.info("Flower threshold set to %s", n)

def show_flash():
    flash = st.session_state.pop("flash", None)
    if not flash:
        return
    kind, msg = flash
    if kind == "toast":
        st.toast(msg)
    else:
        getattr(st, kind)(msg)

# =========================
# 3) UI BLOCKS
# =========================
def header_block(summary):
    st.markdown(f"""
    <div class="card">
      <div style="display:flex; justify-content:space-between; align-items:flex-start; gap:12px;">
        <div>
          <h2 style="margin:0;">Habit Tree</h2>
          <div class="small">Mark your habit done every day. Skipped days cost a leaf.</div>
        </div>
        <div class="badge">🔥 {summary.streak} day streak</div>
      </div>
    </div>
    """, unsafe_allow_html=True)

def stats_block(summary):
    c = st.columns(4)
    c[0].metric("Leaves", summary.leaves)
    c[1].metric("Streak", summary.streak)
    c[2].metric("Last completion", summary.last_date or "—")
    c[3].metric("Flower every", summary.flower_every)

    nxt = leaves_to_next_flower(summary.leaves, summary.flower_every)
    if nxt is None:
        st.caption("The tree is in full bloom.")
    else:
        st.caption(f"{nxt} more leaf/leaves until the next flower.")

def history_block(state, today):
    st.subheader("History")
    frame = completion_frame(state.history, today, days=config.HISTORY_DAYS)
    fig = history_chart(frame, title=f"Last {config.HISTORY_DAYS} days")
    if fig is not None and frame["completed"].any():
        st.plotly_chart(fig, use_container_width=True)
    else:
        st.info("No completions yet. Mark today complete to start growing.")

    week = week_summary(state.history, today)
    c1, c2 = st.columns(2)
    c1.metric("Done in last 7 days", f"{week['completed_last_7']} / 7")
    c2.metric("Longest streak", longest_streak(state.history))

    with st.expander("Raw storage"):
        st.dataframe(storage.load_kv_frame(), use_container_width=True, hide_index=True)

# =========================
# 4) APP UI
# =========================
state, today = load_today()
summary = summarize(state, today)

st.sidebar.markdown("### Settings")
st.sidebar.number_input(
    "Leaves per flower", min_value=1, step=1,
    value=state.flower_every, key="flower_input", on_change=on_threshold_change,
)
st.sidebar.markdown("---")
st.sidebar.write(f"• Today (UTC): **{today}**")
st.sidebar.write(f"• History stored in **{config.DB_PATH}**")

header_block(summary)
show_flash()

b1, b2 = st.columns(2)
b1.button("✅ Mark complete", on_click=on_complete, use_container_width=True)
b2.button("↩️ Undo", on_click=on_undo, use_container_width=True)

left, right = st.columns([1.0, 1.2])
with left:
    st.pyplot(tree_figure(summary.leaves, summary.flowers), clear_figure=True)
with right:
    stats_block(summary)

history_block(state, today)

st.markdown("---")
st.caption("Local DB · single user · dates are counted in UTC")
