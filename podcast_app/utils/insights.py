"""
Lightweight analytics helpers used by the charts and unit tests.
No external deps beyond NumPy.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from podcast_app.utils.scales import Domain


@dataclass(frozen=True)
class Point:
    x: float
    y: float
    label: str
    title: str = ""


@dataclass(frozen=True)
class RegressionResult:
    slope: float
    intercept: float

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept

    def segment(self, domain: Domain) -> tuple[tuple[float, float], tuple[float, float]]:
        """Trend-line endpoints across `domain`, in data coordinates."""
        return (
            (domain.min, self.predict(domain.min)),
            (domain.max, self.predict(domain.max)),
        )


def _xy(points: Sequence[Point]) -> tuple[np.ndarray, np.ndarray]:
    x = np.fromiter((p.x for p in points), dtype=float, count=len(points))
    y = np.fromiter((p.y for p in points), dtype=float, count=len(points))
    return x, y


def fit(points: Sequence[Point]) -> RegressionResult:
    """
    Fit y = intercept + slope*x via ordinary least squares (closed form sums).

    - All x equal, or fewer than two points: slope 0, intercept mean(y).
    - Empty input: slope 0, intercept 0.
    """
    n = len(points)
    if n == 0:
        return RegressionResult(slope=0.0, intercept=0.0)

    x, y = _xy(points)
    sum_x = float(np.sum(x))
    sum_y = float(np.sum(y))
    sum_xy = float(np.sum(x * y))
    sum_xx = float(np.sum(x * x))

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return RegressionResult(slope=0.0, intercept=sum_y / n)

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return RegressionResult(slope=slope, intercept=intercept)


def r_squared(points: Sequence[Point], result: RegressionResult) -> float:
    if not points:
        return 0.0
    x, y = _xy(points)
    y_hat = result.slope * x + result.intercept
    ss_res = float(np.sum((y - y_hat) ** 2))
    ss_tot = float(np.sum((y - np.mean(y)) ** 2))
    return 1.0 - ss_res / ss_tot if ss_tot > 0 else 0.0


def best_by(points: Sequence[Point], key: str) -> Optional[Point]:
    """Point with the largest `x` or `y`; first one wins on ties."""
    best = None
    for p in points:
        if best is None or getattr(p, key) > getattr(best, key):
            best = p
    return best


# -------- Auto-insight text --------

def duration_completion_insights(points: Sequence[Point], reg: RegressionResult, r2: float) -> list[str]:
    if not points:
        return ["No episodes to analyse yet."]
    lines = []
    best = best_by(points, "y")
    lines.append(
        f"• Episode **{best.label}** holds the highest completion at **{best.y:.1%}** "
        f"({best.x:.1f} min)."
    )
    per_10 = reg.slope * 10
    if per_10 < 0:
        lines.append(f"• Every extra 10 minutes costs ~**{abs(per_10):.1%}** completion.")
    else:
        lines.append(f"• Longer episodes are **not** losing listeners (+{per_10:.1%} per 10 min).")
    lines.append(f"• Runtime explains **{r2:.1%}** of the variation in completion.")
    return lines


def listener_mix_insights(new_share: Sequence[float]) -> list[str]:
    if len(new_share) == 0:
        return ["No listener data yet."]
    arr = np.asarray(new_share, dtype=float)
    latest = float(arr[-1])
    avg = float(arr.mean())
    lines = [f"• New listeners make up **{latest:.0%}** of the latest episode (average {avg:.0%})."]
    if latest > avg:
        lines.append("• Acquisition is running ahead of the back catalogue: add retention hooks.")
    else:
        lines.append("• The audience leans on returning listeners: consider an acquisition push.")
    return lines


def subscriber_growth_insights(episodes: Sequence[float], cumulative: Sequence[float]) -> list[str]:
    if len(cumulative) == 0:
        return ["No subscriber history yet."]
    cum = np.asarray(cumulative, dtype=float)
    lines = [f"• Total subscribers now **{cum[-1]:,.0f}**."]
    if cum.size >= 2:
        jumps = np.diff(cum)
        i = int(np.argmax(jumps))
        lines.append(
            f"• Biggest single-episode lift: **+{jumps[i]:,.0f}** at episode {episodes[i + 1]:g}."
        )
        lines.append(f"• Average lift per episode: {jumps.mean():,.0f}.")
    return lines


def shares_subscribers_insights(points: Sequence[Point], reg: RegressionResult, r2: float) -> list[str]:
    if not points:
        return ["No share data yet."]
    top = best_by(points, "x")
    lines = [
        f"• Every 100 shares bring ~**{reg.slope * 100:,.1f}** new subscribers (R² {r2:.2f}).",
        f"• Biggest share push: episode **{top.label}** with {top.x:,.0f} shares → {top.y:,.0f} subscribers.",
    ]
    return lines
