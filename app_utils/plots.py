import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.patches import Ellipse
import plotly.express as px
import seaborn as sns

sns.set_theme(style="white")

# (x offset from trunk centre, height, rotation in degrees, alt shade)
LEAF_SLOTS = [
    (-42, 40, -30, False),
    (30, 20, 20, True),
    (-70, 120, -48, True),
    (48, 90, 36, False),
    (-30, 170, -18, False),
    (18, 150, 10, True),
    (-56, 230, -12, False),
    (56, 200, 14, True),
    (-18, 280, -6, False),
    (36, 260, 6, True),
    (-14, 70, -6, False),
    (8, 320, 10, True),
    (-88, 60, -60, False),
    (88, 70, 60, True),
    (0, 10, 0, False),
]
FLOWER_SLOTS = [(-10, 320), (36, 210), (-52, 190)]

LEAF_COLORS = dict(zip(("leaf", "alt"), sns.color_palette("Greens_r", 2)))
FLOWER_COLOR = "#f06595"


def clean_axes(ax):
    for side in ("top", "right", "left", "bottom"):
        ax.spines[side].set_visible(False)
    ax.set_xticks([])
    ax.set_yticks([])
    ax.set_xlabel("")
    ax.set_ylabel("")


def leaf_positions(leaves):
    # slots repeat once there are more leaves than slots
    rows = []
    for i in range(max(0, leaves)):
        x, y, rot, _ = LEAF_SLOTS[i % len(LEAF_SLOTS)]
        rows.append({"x": x, "y": y, "rot": rot, "shade": "alt" if i % 2 == 0 else "leaf"})
    return pd.DataFrame(rows, columns=["x", "y", "rot", "shade"])


def tree_figure(leaves, flowers):
    fig, ax = plt.subplots(figsize=(4, 5), dpi=120)
    ax.set_xlim(-130, 130)
    ax.set_ylim(-40, 380)

    # trunk + two branches
    ax.plot([0, 0], [-30, 300], color="#7a5230", linewidth=14, solid_capstyle="round", zorder=1)
    ax.plot([0, -60], [150, 230], color="#7a5230", linewidth=6, solid_capstyle="round", zorder=1)
    ax.plot([0, 55], [120, 200], color="#7a5230", linewidth=6, solid_capstyle="round", zorder=1)

    for leaf in leaf_positions(leaves).itertuples():
        ax.add_patch(Ellipse((leaf.x, leaf.y), width=22, height=40, angle=-leaf.rot,
                             facecolor=LEAF_COLORS[leaf.shade], edgecolor="#2d6a36", zorder=2))

    for i in range(max(0, flowers)):
        x, y = FLOWER_SLOTS[i % len(FLOWER_SLOTS)]
        ax.scatter([x], [y], s=420, marker="*", color=FLOWER_COLOR, edgecolor="white", zorder=3)

    clean_axes(ax)
    fig.tight_layout()
    return fig


def history_chart(frame, title="Last days"):
    if frame is None or frame.empty:
        return None
    fig = px.bar(frame, x="date", y="completed", title=title)
    fig.update_layout(
        height=260,
        margin=dict(l=10, r=10, t=40, b=10),
        yaxis=dict(range=[0, 1], showticklabels=False, title=""),
        xaxis=dict(title=""),
    )
    fig.update_traces(marker_color="#3f9b4f")
    return fig
