"""
Tests for the knowledge streak and answer statistics.
"""

from ..engine_core.state import KnowledgeStreak, Statistics
from ..engine_core.streak import advance_streak, apply_answer, record_answer, streak_signal


class TestAdvanceStreak:
    """Tests for streak bookkeeping."""

    def test_correct_extends(self):
        streak = advance_streak(KnowledgeStreak(current=2, best=2), True)
        assert streak.current == 3
        assert streak.best == 3
        assert streak.last_correct_time is not None

    def test_wrong_resets_current_only(self):
        """A miss resets the run but keeps the best."""
        before = KnowledgeStreak(current=6, best=8)
        streak = advance_streak(before, False)
        assert streak.current == 0
        assert streak.best == 8
        assert streak.last_correct_time == before.last_correct_time


class TestStreakSignal:
    """Tests for the milestone cue."""

    def test_signal_on_milestone(self):
        signal = streak_signal(KnowledgeStreak(current=10, best=10))
        assert signal.message == "10 Streak! +20% Bonus!"
        assert signal.style_hint == "text-yellow-400"

    def test_no_signal_between_milestones(self):
        assert streak_signal(KnowledgeStreak(current=4, best=4)) is None
        assert streak_signal(KnowledgeStreak()) is None


class TestRecordAnswer:
    """Tests for answer statistics."""

    def test_without_category(self):
        """Uncategorized answers count toward totals only."""
        stats = record_answer(Statistics(), True, None)
        assert stats.total_questions_answered == 1
        assert stats.correct_answers == 1
        assert stats.accuracy_by_category == {}

    def test_category_accumulates(self):
        stats = record_answer(Statistics(), True, "history")
        stats = record_answer(stats, False, "history")
        accuracy = stats.accuracy_by_category["history"]
        assert (accuracy.correct, accuracy.total) == (1, 2)


class TestApplyAnswer:
    """Tests for the combined update."""

    def test_fifth_correct_answer(self, new_state):
        state = new_state._copy_with(knowledge_streak=KnowledgeStreak(current=4, best=4))
        new_state_, signals = apply_answer(state, True, "science")

        assert new_state_.knowledge_streak.current == 5
        assert new_state_.statistics.correct_answers == 1
        assert [s.message for s in signals] == ["5 Streak! +10% Bonus!"]
        assert state.knowledge_streak.current == 4

    def test_wrong_answer_no_signal(self, new_state):
        _, signals = apply_answer(new_state, False)
        assert signals == []
