import json
import logging
import os

import pandas as pd
from sqlalchemy import create_engine, text

from app_utils import config
from app_utils.goals import parse_flower_threshold
from features.habits import HabitState, valid_key

logger = logging.getLogger(__name__)

STORAGE_LEAVES = "habitTree_leaves"
STORAGE_LAST = "habitTree_last"
STORAGE_HISTORY = "habitTree_history"
STORAGE_FLOWER_EVERY = "habitTree_flower_every"
STORAGE_DECAYED = "habitTree_decayed"

DB_PATH = config.DB_PATH
engine = create_engine(f"sqlite:///{DB_PATH}", echo=False)


def init_db(eng=None):
    if eng is None:
        os.makedirs(os.path.dirname(DB_PATH) or ".", exist_ok=True)
    with (eng or engine).begin() as conn:
        conn.execute(text("""
        CREATE TABLE IF NOT EXISTS kv (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
        """))


# ---------- raw key/value ----------

def _get(conn, key):
    row = conn.execute(text("SELECT value FROM kv WHERE key=:key"), {"key": key}).fetchone()
    return row[0] if row else None


def _set(conn, key, value):
    conn.execute(text("""
        INSERT INTO kv(key, value) VALUES(:key, :value)
        ON CONFLICT(key) DO UPDATE SET value=excluded.value
    """), {"key": key, "value": str(value)})


def _delete(conn, key):
    conn.execute(text("DELETE FROM kv WHERE key=:key"), {"key": key})


def get_value(key, eng=None):
    with (eng or engine).connect() as conn:
        return _get(conn, key)


def set_value(key, value, eng=None):
    with (eng or engine).begin() as conn:
        _set(conn, key, value)


def delete_value(key, eng=None):
    with (eng or engine).begin() as conn:
        _delete(conn, key)


def load_kv_frame(eng=None):
    return pd.read_sql(text("SELECT key, value FROM kv ORDER BY key"), eng or engine)


# ---------- typed readers / writers ----------

def _parse_leaves(raw):
    try:
        return max(0, int(raw or "0"))
    except ValueError:
        logger.warning("Stored leaf count %r is not a number, using 0", raw)
        return 0


def _parse_history(raw):
    try:
        hist = json.loads(raw or "[]")
    except ValueError:
        logger.warning("Stored history is not valid JSON, treating it as empty")
        return []
    if not isinstance(hist, list):
        logger.warning("Stored history is not a list, treating it as empty")
        return []
    keys = [d for d in hist if valid_key(d)]
    if len(keys) != len(hist):
        logger.warning("Dropped %s stored history entries that are not dates", len(hist) - len(keys))
    return keys


def _parse_date(raw, name):
    if not raw:
        return None
    if not valid_key(raw):
        logger.warning("Stored %s %r is not a date, treating it as absent", name, raw)
        return None
    return raw


def read_leaves(eng=None):
    return _parse_leaves(get_value(STORAGE_LEAVES, eng))


def write_leaves(n, eng=None):
    set_value(STORAGE_LEAVES, max(0, int(n)), eng)


def read_history(eng=None):
    return _parse_history(get_value(STORAGE_HISTORY, eng))


def write_history(hist, eng=None):
    set_value(STORAGE_HISTORY, json.dumps(list(hist)), eng)


def read_last(eng=None):
    return _parse_date(get_value(STORAGE_LAST, eng), "last completion date")


def write_last(key, eng=None):
    if key:
        set_value(STORAGE_LAST, key, eng)
    else:
        delete_value(STORAGE_LAST, eng)


def read_flower_every(eng=None):
    return parse_flower_threshold(get_value(STORAGE_FLOWER_EVERY, eng), default=config.DEFAULT_FLOWER_EVERY)


def write_flower_every(n, eng=None):
    set_value(STORAGE_FLOWER_EVERY, max(1, int(n)), eng)


def read_decayed(eng=None):
    return _parse_date(get_value(STORAGE_DECAYED, eng), "decay checkpoint")


def write_decayed(key, eng=None):
    if key:
        set_value(STORAGE_DECAYED, key, eng)
    else:
        delete_value(STORAGE_DECAYED, eng)


# ---------- whole state ----------

def load_state(eng=None):
    with (eng or engine).connect() as conn:
        raw = {k: _get(conn, k) for k in (STORAGE_LEAVES, STORAGE_LAST, STORAGE_HISTORY,
                                           STORAGE_FLOWER_EVERY, STORAGE_DECAYED)}
    return HabitState(
        leaves=_parse_leaves(raw[STORAGE_LEAVES]),
        last_date=_parse_date(raw[STORAGE_LAST], "last completion date"),
        history=_parse_history(raw[STORAGE_HISTORY]),
        flower_every=parse_flower_threshold(raw[STORAGE_FLOWER_EVERY], default=config.DEFAULT_FLOWER_EVERY),
        decayed_through=_parse_date(raw[STORAGE_DECAYED], "decay checkpoint"),
    )


def save_state(state, eng=None):
    """Write every key in one transaction."""
    with (eng or engine).begin() as conn:
        _set(conn, STORAGE_LEAVES, max(0, int(state.leaves)))
        _set(conn, STORAGE_HISTORY, json.dumps(list(state.history)))
        _set(conn, STORAGE_FLOWER_EVERY, max(1, int(state.flower_every)))
        for key, value in ((STORAGE_LAST, state.last_date), (STORAGE_DECAYED, state.decayed_through)):
            if value:
                _set(conn, key, value)
            else:
                _delete(conn, key)
