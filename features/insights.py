import pandas as pd

from features.habits import parse_key


def completion_frame(history, today, days=30):
    # one row per day in the window ending today; duplicates count once
    end = pd.Timestamp(parse_key(today))
    index = pd.date_range(end=end, periods=days, freq="D")
    done = pd.to_datetime(pd.Series(list(history), dtype="object"), format="%Y-%m-%d", errors="coerce")
    done = set(done.dropna())

    return pd.DataFrame({
        "date": index,
        "completed": [1 if d in done else 0 for d in index],
    })


def longest_streak(history):
    if not history:
        return 0

    d = pd.to_datetime(pd.Series(list(history), dtype="object"), format="%Y-%m-%d", errors="coerce")
    d = d.dropna().drop_duplicates().sort_values().reset_index(drop=True)
    if d.empty:
        return 0

    # a new run starts wherever the gap to the previous day is not exactly one day
    run_id = (d.diff() != pd.Timedelta(days=1)).cumsum()
    return int(run_id.value_counts().max())


def week_summary(history, today):
    frame = completion_frame(history, today, days=7)
    done = int(frame["completed"].sum())
    return {
        "completed_last_7": done,
        "completion_rate": done / 7.0,
    }
