# viz.py
from typing import Sequence

import matplotlib.pyplot as plt
from matplotlib.ticker import FuncFormatter

from formatting import short_thousands
from models import CategorySlice, MonthBucket

INCOME_COLOR = "#34d399"
EXPENSE_COLOR = "#f87171"


def plot_monthly_trend(buckets: Sequence[MonthBucket], ax=None, title="Thu chi 6 tháng gần nhất"):
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 4))
    labels = [b.label for b in buckets]
    x = range(len(buckets))
    width = 0.38
    ax.bar([i - width / 2 for i in x], [b.income_total for b in buckets], width, label="Thu", color=INCOME_COLOR)
    ax.bar([i + width / 2 for i in x], [b.expense_total for b in buckets], width, label="Chi", color=EXPENSE_COLOR)
    ax.set_xticks(list(x))
    ax.set_xticklabels(labels)
    ax.yaxis.set_major_formatter(FuncFormatter(lambda v, _pos: short_thousands(v)))
    ax.set_title(title)
    ax.legend()
    plt.tight_layout()
    return ax


def plot_category_pie(breakdown: Sequence[CategorySlice], ax=None, title="Cơ cấu chi tiêu"):
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 6))
    if not breakdown:
        ax.text(0.5, 0.5, "Chưa có dữ liệu chi tiêu", ha="center", va="center")
        ax.set_axis_off()
    else:
        ax.pie(
            [s.total_amount for s in breakdown],
            labels=[s.category for s in breakdown],
            colors=[s.color for s in breakdown],
            autopct="%1.0f%%",
            wedgeprops={"width": 0.4},
        )
    ax.set_title(title)
    return ax
