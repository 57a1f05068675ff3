"""
Habit tree engine.

Pure functions over the persisted habit state: load-time decay, marking the
habit complete, undo, streak and flower counts. Nothing here touches storage
or Streamlit; app.py reads a HabitState, calls into this module and saves
whatever comes back.

Dates travel as "YYYY-MM-DD" keys normalised to UTC so that day arithmetic
never depends on the local timezone.
"""
import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Tuple

from features.exceptions import NothingToUndo

logger = logging.getLogger(__name__)

DATE_FMT = "%Y-%m-%d"
MAX_FLOWERS = 3
DEFAULT_FLOWER_EVERY = 7


@dataclass(frozen=True)
class HabitState:
    leaves: int = 0
    last_date: Optional[str] = None
    history: List[str] = field(default_factory=list)
    flower_every: int = DEFAULT_FLOWER_EVERY
    # day on which load-time decay was last applied
    decayed_through: Optional[str] = None


@dataclass(frozen=True)
class TreeSummary:
    leaves: int
    streak: int
    last_date: Optional[str]
    flowers: int
    flower_every: int


# ---------- dates ----------

def date_key(d) -> str:
    if isinstance(d, datetime):
        if d.tzinfo is not None:
            d = d.astimezone(timezone.utc)
        d = d.date()
    return d.strftime(DATE_FMT)


def today_key(now: Optional[datetime] = None) -> str:
    return date_key(now or datetime.now(timezone.utc))


def parse_key(key: str) -> date:
    return datetime.strptime(key, DATE_FMT).date()


def valid_key(key) -> Optional[str]:
    """Return `key` if it parses as a date key, else None."""
    if not isinstance(key, str):
        return None
    try:
        parse_key(key)
    except ValueError:
        return None
    return key


def days_between(a: str, b: str) -> int:
    """Whole calendar days from key `a` to key `b` (negative if b is earlier)."""
    return (parse_key(b) - parse_key(a)).days


def shift_key(key: str, days: int) -> str:
    return date_key(parse_key(key) + timedelta(days=days))


# ---------- operations ----------

def compute_decay(last_date: Optional[str], today: str, leaf_count: int) -> int:
    """One leaf lost per missed day, never below zero."""
    if not valid_key(last_date):
        return leaf_count
    days_missed = days_between(last_date, today)
    if days_missed <= 0:
        # completed today, or last date lies in the future
        return leaf_count
    return leaf_count - min(leaf_count, days_missed)


def mark_complete(history: List[str], last_date: Optional[str], leaf_count: int,
                  today: str) -> Tuple[List[str], int, Optional[str]]:
    if last_date == today:
        return history, leaf_count, last_date
    return list(history) + [today], leaf_count + 1, today


def undo(history: List[str], leaf_count: int) -> Tuple[List[str], int, Optional[str]]:
    if not history:
        raise NothingToUndo()
    remaining = list(history[:-1])
    leaves = leaf_count - 1 if leaf_count > 0 else 0
    new_last = remaining[-1] if remaining else None
    return remaining, leaves, new_last


def compute_streak(history: List[str], today: str) -> int:
    done = set(history)
    streak = 0
    cursor = today
    while cursor in done:
        streak += 1
        cursor = shift_key(cursor, -1)
    return streak


def compute_flower_count(leaf_count: int, flower_threshold: int) -> int:
    return min(MAX_FLOWERS, leaf_count // max(1, flower_threshold))


# ---------- state transitions ----------

def apply_load_decay(state: HabitState, today: str) -> Tuple[HabitState, int]:
    """
    Decay applied when the page loads.

    Days already charged are remembered in `decayed_through`, so a second
    load on the same day removes nothing and a load the next day removes
    only one more leaf. History is left alone even when leaves are lost.
    """
    # unparsable dates count as absent
    anchor = valid_key(state.last_date)
    checkpoint = valid_key(state.decayed_through)
    if checkpoint and (not anchor or days_between(anchor, checkpoint) > 0):
        anchor = checkpoint

    leaves = compute_decay(anchor, today, state.leaves)
    removed = state.leaves - leaves
    if removed:
        logger.info("Decay: %s missed day(s) since %s, removed %s leaf/leaves", days_between(anchor, today), anchor, removed)

    if state.decayed_through == today and not removed:
        return state, 0
    return replace(state, leaves=leaves, decayed_through=today), removed


def complete(state: HabitState, today: str) -> Tuple[HabitState, bool]:
    history, leaves, last = mark_complete(state.history, state.last_date, state.leaves, today)
    if last == state.last_date:
        logger.debug("Already completed %s", today)
        return state, False
    logger.info("Completed %s, leaves now %s", today, leaves)
    return replace(state, history=history, leaves=leaves, last_date=last), True


def undo_last(state: HabitState) -> HabitState:
    history, leaves, last = undo(state.history, state.leaves)
    logger.info("Undid %s, leaves now %s", state.history[-1], leaves)
    return replace(state, history=history, leaves=leaves, last_date=last)


def set_flower_threshold(state: HabitState, n) -> HabitState:
    # imported here to avoid a circular import with app_utils.goals
    from app_utils.goals import parse_flower_threshold
    return replace(state, flower_every=parse_flower_threshold(n, default=state.flower_every))


def summarize(state: HabitState, today: str) -> TreeSummary:
    return TreeSummary(
        leaves=state.leaves,
        streak=compute_streak(state.history, today),
        last_date=state.last_date,
        flowers=compute_flower_count(state.leaves, state.flower_every),
        flower_every=state.flower_every,
    )
