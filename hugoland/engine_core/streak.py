"""
Knowledge streak and answer statistics.

Every answered question updates both, before the answer's combat
effect is applied.
"""

from __future__ import annotations
from dataclasses import replace
from datetime import datetime

from .feedback import FeedbackSignal
from .state import (
    CategoryAccuracy,
    GameState,
    KnowledgeStreak,
    STREAK_STEP,
    Statistics,
    utc_now,
)


def advance_streak(
    streak: KnowledgeStreak,
    correct: bool,
    now: datetime | None = None,
) -> KnowledgeStreak:
    current = streak.current + 1 if correct else 0
    return KnowledgeStreak(
        current=current,
        best=max(streak.best, current),
        last_correct_time=(now or utc_now()) if correct else streak.last_correct_time,
    )


def streak_signal(streak: KnowledgeStreak) -> FeedbackSignal | None:
    """Celebration cue on every fifth consecutive correct answer."""
    if streak.current > 0 and streak.current % STREAK_STEP == 0:
        bonus = round((streak.multiplier - 1) * 100)
        return FeedbackSignal.text(
            f"{streak.current} Streak! +{bonus}% Bonus!", "text-yellow-400"
        )
    return None


def record_answer(statistics: Statistics, correct: bool, category: str | None) -> Statistics:
    """Count an answer overall and, when a category is given, per category."""
    accuracy = statistics.accuracy_by_category
    if category is not None:
        previous = accuracy.get(category, CategoryAccuracy())
        accuracy = {
            **accuracy,
            category: CategoryAccuracy(
                correct=previous.correct + (1 if correct else 0),
                total=previous.total + 1,
            ),
        }
    return replace(
        statistics,
        total_questions_answered=statistics.total_questions_answered + 1,
        correct_answers=statistics.correct_answers + (1 if correct else 0),
        accuracy_by_category=accuracy,
    )


def apply_answer(
    state: GameState,
    correct: bool,
    category: str | None = None,
) -> tuple[GameState, list[FeedbackSignal]]:
    """Record an answer in statistics and the knowledge streak."""
    streak = advance_streak(state.knowledge_streak, correct)
    signals = []
    if correct:
        signal = streak_signal(streak)
        if signal:
            signals.append(signal)

    new_state = state._copy_with(
        knowledge_streak=streak,
        statistics=record_answer(state.statistics, correct, category),
    )
    return new_state, signals
