"""Synthetic progress for sessions whose backend reports no progress of its own.

The estimate is a saturating exponential of the elapsed time. It is only a display aid: an
authoritative progress value, or completion, always takes precedence over it.
"""

import math
from datetime import datetime

from pydantic import BaseModel

from shared.models.config import ProgressConfig
from shared.models.session import SessionState, SessionStatus

COMPLETE_PERCENT = 100

# (exclusive upper bound in percent, label)
STEP_THRESHOLDS = (
    (10, "Initializing"),
    (30, "Scanning document"),
    (60, "Analyzing content"),
    (80, "Extracting data"),
)
FINAL_STEP_LABEL = "Finalizing extraction"
COMPLETE_STEP_LABEL = "Extraction complete"


class ProgressEstimate(BaseModel):
    percent: int
    step_label: str
    estimated: bool = True


def step_label(percent: int) -> str:
    for upper_bound, label in STEP_THRESHOLDS:
        if percent < upper_bound:
            return label
    return FINAL_STEP_LABEL


def estimate_progress(elapsed_seconds: float, config: ProgressConfig | None = None) -> ProgressEstimate:
    """
    Estimate progress from the time elapsed since the session was created.

    Args:
        elapsed_seconds (float): Seconds since creation; negative values count as 0.
        config (ProgressConfig | None): Curve settings, defaults to tau 180s and a 95% ceiling.

    Returns:
        ProgressEstimate: Percent in [0, max_percent] and its step label.
    """
    config = config or ProgressConfig()
    elapsed = max(0.0, float(elapsed_seconds))
    raw = 100 * (1 - math.exp(-elapsed / config.tau_seconds))
    # half-up rounding, so 0.5 steps never round down to the even neighbour
    percent = min(config.max_percent, int(math.floor(raw + 0.5)))
    return ProgressEstimate(percent=percent, step_label=step_label(percent))


def resolve_progress(status: SessionStatus, now: datetime | None = None, config: ProgressConfig | None = None) -> ProgressEstimate:
    """
    Pick the progress to show for a session.

    Authoritative progress reported by the backend wins, a complete session shows 100, and
    everything else falls back to the estimate from the session's age.
    """
    if status.progress is not None:
        percent = max(0, min(COMPLETE_PERCENT, status.progress))
        return ProgressEstimate(percent=percent, step_label=status.current_step or step_label(percent), estimated=False)

    if status.status == SessionState.COMPLETE:
        return ProgressEstimate(percent=COMPLETE_PERCENT, step_label=status.current_step or COMPLETE_STEP_LABEL, estimated=False)

    return estimate_progress(status.elapsed_seconds(now), config=config)
