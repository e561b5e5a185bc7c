"""XP, level and streak calculations.

Rules:
    +2 XP per 5 minutes of study (rounded down)
    +5 XP for creating a resource with priority 1 (highest)
    +10 XP for marking a goal completed

Level = floor(sqrt(XP) / 2) + 1, so level boundaries sit at XP 0, 4, 16, 36, 64, ...
"""
import math
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from study_hub.models import LevelInfo, ProgressState, StreakInfo, StudySession, XPGain

XP_RULES = {
    "study_minutes_per_block": 5,
    "xp_per_study_block": 2,
    "high_priority_resource": 5,
    "completed_goal": 10,
}

LEVEL_MESSAGES = [
    (1, "Getting started!"),
    (3, "Building momentum!"),
    (5, "On a roll!"),
    (10, "Learning machine!"),
    (15, "Knowledge seeker!"),
    (20, "Study master!"),
]


def calculate_session_xp(duration_minutes: int) -> XPGain:
    """XP for a study session. Expects duration_minutes >= 0; negatives count as 0."""
    minutes = max(0, duration_minutes)
    blocks = minutes // XP_RULES["study_minutes_per_block"]
    return XPGain(
        amount=blocks * XP_RULES["xp_per_study_block"],
        reason=f"{minutes} minutes of study ({blocks} blocks)",
    )


def calculate_resource_xp(priority: int) -> Optional[XPGain]:
    if priority == 1:
        return XPGain(amount=XP_RULES["high_priority_resource"], reason="Created high-priority resource")
    return None


def calculate_goal_completion_xp() -> XPGain:
    return XPGain(amount=XP_RULES["completed_goal"], reason="Completed a goal")


def xp_for_level(level: int) -> int:
    """Minimum XP required to reach a level."""
    if level <= 1:
        return 0
    return (2 * (level - 1)) ** 2


def calculate_level(total_xp: int) -> LevelInfo:
    """Derive level info from cumulative XP."""
    xp = max(0, total_xp)
    # isqrt keeps the (2k)^2 boundaries exact for large totals
    level = math.isqrt(xp) // 2 + 1
    current_floor = xp_for_level(level)
    next_floor = xp_for_level(level + 1)
    progress = (xp - current_floor) / (next_floor - current_floor)
    return LevelInfo(
        level=level,
        current_xp=xp,
        xp_for_current_level=current_floor,
        xp_for_next_level=next_floor,
        progress_to_next=min(1.0, max(0.0, progress)),
    )


def _local_day(started_at) -> date:
    if isinstance(started_at, datetime):
        if started_at.tzinfo is not None:
            started_at = started_at.astimezone()
        return started_at.date()
    return started_at


def studied_days(sessions: Iterable[StudySession]) -> set[date]:
    """Calendar days whose summed session duration is positive."""
    totals: dict[date, int] = {}
    for s in sessions:
        day = _local_day(s.started_at)
        totals[day] = totals.get(day, 0) + s.duration_minutes
    return {day for day, minutes in totals.items() if minutes > 0}


def calculate_streak(sessions: Iterable[StudySession], today: Optional[date] = None) -> StreakInfo:
    """Current and longest runs of consecutive studied days.

    The current streak is anchored on today if studied, else on yesterday,
    so a streak is not broken until a full day has been missed.
    """
    days = studied_days(sessions)
    if not days:
        return StreakInfo(0, 0)
    today = today or date.today()
    one_day = timedelta(days=1)

    if today in days:
        anchor = today
    elif today - one_day in days:
        anchor = today - one_day
    else:
        anchor = None

    current = 0
    while anchor is not None and anchor in days:
        current += 1
        anchor -= one_day

    longest = 0
    run = 0
    previous = None
    for day in sorted(days):
        run = run + 1 if previous is not None and day - previous == one_day else 1
        longest = max(longest, run)
        previous = day

    return StreakInfo(current_streak=current, longest_streak=longest)


def apply_xp(progress: ProgressState, *gains: Optional[XPGain]) -> ProgressState:
    """Add every gain to the progress state and recompute the level once."""
    total = progress.xp + sum(g.amount for g in gains if g is not None)
    return replace(progress, xp=total, level=calculate_level(total).level)


def apply_streak(progress: ProgressState, streak: StreakInfo) -> ProgressState:
    return replace(
        progress,
        current_streak_days=streak.current_streak,
        longest_streak_days=max(progress.longest_streak_days, streak.longest_streak),
    )


def get_level_message(level: int) -> str:
    for ceiling, message in LEVEL_MESSAGES:
        if level <= ceiling:
            return message
    return "Legendary learner!"
