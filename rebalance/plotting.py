"""Donut charts and a summary table for a lazy rebalance."""

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.gridspec import GridSpec

from rebalance.report import money
from rebalance.report import percent


# ---------------------------------------------------------------------------
# Donut helpers
# ---------------------------------------------------------------------------

def _make_colors(n_assets):
    """One hue per asset, cycling through tab10 and lightening each lap."""
    cmap = plt.colormaps["tab10"]
    colors = []
    for i in range(n_assets):
        base = np.array(cmap(i % 10)[:3])
        lap = i // 10
        colors.append(base + (1.0 - base) * min(lap * 0.3, 0.9))
    return colors


def _draw_donut(ax, labels, sizes, colors, title):
    """Draw a single donut on *ax*; wedges under 3% go unlabelled."""
    sizes = np.clip(np.asarray(sizes, dtype=float), 0.0, None)
    if not sizes.size or not sizes.any():
        ax.set_axis_off()
        ax.set_title(title, fontsize=12, pad=12)
        return

    R = 1.0
    w = 0.45
    wedges, _ = ax.pie(
        sizes, radius=R, colors=colors,
        wedgeprops=dict(width=w, edgecolor="white", linewidth=0.5),
        startangle=90, counterclock=False)

    total = sizes.sum()
    for wedge, label, size in zip(wedges, labels, sizes):
        pct = size / total * 100
        if pct < 3:
            continue
        mid = (wedge.theta1 + wedge.theta2) / 2
        mr = R - w / 2
        x = mr * np.cos(np.radians(mid))
        y = mr * np.sin(np.radians(mid))
        ax.text(x, y, f"{label}\n{pct:.1f}%",
                ha="center", va="center", fontsize=7)

    ax.set_title(title, fontsize=12, pad=12)
    ax.set_aspect("equal")


# ---------------------------------------------------------------------------
# Table helpers
# ---------------------------------------------------------------------------

def _add_table(ax, title, col_labels, rows):
    """Render a styled table on *ax*."""
    ax.set_axis_off()
    if title:
        ax.set_title(title, fontsize=9, fontweight="bold", loc="left", pad=8)

    table = ax.table(
        cellText=rows,
        colLabels=col_labels,
        cellLoc="center",
        loc="center",
    )
    table.auto_set_font_size(False)
    table.set_fontsize(7.5)
    table.auto_set_column_width(range(len(col_labels)))

    for j in range(len(col_labels)):
        table[0, j].set_facecolor("#4472C4")
        table[0, j].set_text_props(color="white", fontweight="bold", fontsize=7)

    for i in range(len(rows)):
        for j in range(len(col_labels)):
            table[i + 1, j].set_facecolor("#D9E2F3" if i % 2 == 0 else "white")

    table.scale(1, 1.4)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def plot_rebalance(rebalanced, path="rebalance_report.pdf"):
    """Save current/new allocation donuts and a per-asset table to *path*."""
    labels = [item.name for item in rebalanced]
    colors = _make_colors(len(rebalanced))
    current = [float(item.current_value) for item in rebalanced]
    new = [float(item.new_value) for item in rebalanced]

    col_labels = [
        "Asset", "Value ($)", "Buy/sell ($)",
        "Old (%)", "New (%)", "Target (%)"]
    rows = [
        [item.name, money(item.current_value), money(item.amount),
         percent(item.actual_allocation), percent(item.new_allocation),
         percent(item.target_fraction)]
        for item in rebalanced
    ]

    # --- Layout ---
    donut_h = 5.0
    table_h = 0.4 * (len(rows) + 1) + 0.7
    fig = plt.figure(figsize=(10, donut_h + table_h))
    gs = GridSpec(2, 2, figure=fig, height_ratios=[donut_h, table_h])

    # --- Donuts ---
    for col, sizes, title in [(0, current, "Current Allocation"),
                              (1, new, "New Allocation")]:
        ax = fig.add_subplot(gs[0, col])
        _draw_donut(ax, labels, sizes, colors, title)

    # --- Table ---
    ax_t = fig.add_subplot(gs[1, :])
    _add_table(ax_t, "", col_labels, rows)

    fig.suptitle("Lazy Rebalance", fontsize=14)
    fig.tight_layout()
    plt.savefig(path, bbox_inches="tight")
    plt.close(fig)
    return path
