import os

APP_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DATA_DIR = os.getenv("HABIT_TREE_DATA_DIR", os.path.join(APP_DIR, "data"))
DB_PATH = os.getenv("HABIT_TREE_DB", os.path.join(DATA_DIR, "habit_tree.db"))

LOG_FILE = os.getenv("HABIT_TREE_LOG_FILE", os.path.join(DATA_DIR, "habit_tree.log"))
LOG_LEVEL = os.getenv("HABIT_TREE_LOG_LEVEL", "INFO").upper()


def _env_int(name, default):
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# leaves required per flower when nothing is stored yet
DEFAULT_FLOWER_EVERY = max(1, _env_int("HABIT_TREE_FLOWER_EVERY", 7))

# window for the completion chart
HISTORY_DAYS = max(7, _env_int("HABIT_TREE_HISTORY_DAYS", 30))
