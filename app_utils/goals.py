import math

from features.habits import MAX_FLOWERS


def parse_flower_threshold(raw, default=7):
    # empty input falls back to the default, junk clamps to 1
    if raw is None or str(raw).strip() == "":
        return max(1, int(default))
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 1
    if math.isnan(value) or math.isinf(value):
        return 1
    return max(1, math.floor(value))


def leaves_to_next_flower(leaves, flower_every):
    flower_every = max(1, flower_every)
    if leaves // flower_every >= MAX_FLOWERS:
        return None
    return flower_every - (leaves % flower_every)
