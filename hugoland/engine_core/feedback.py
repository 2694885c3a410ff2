"""
Feedback Signals - Fire-and-forget presentation cues.

The reducer never talks to the presentation layer directly. Handlers
attach signals to their ActionResult, and the store forwards them to
whatever FeedbackChannel the presentation registered. Nothing is ever
read back.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class SignalKind(Enum):
    TEXT = "text"
    PARTICLES = "particles"
    SHAKE = "shake"


@dataclass(frozen=True)
class FeedbackSignal:
    """A single visual cue."""
    kind: SignalKind
    message: str | None = None
    style_hint: str | None = None

    @classmethod
    def text(cls, message: str, style_hint: str) -> FeedbackSignal:
        return cls(kind=SignalKind.TEXT, message=message, style_hint=style_hint)

    @classmethod
    def particles(cls) -> FeedbackSignal:
        return cls(kind=SignalKind.PARTICLES)

    @classmethod
    def shake(cls) -> FeedbackSignal:
        return cls(kind=SignalKind.SHAKE)


class FeedbackChannel(ABC):
    """Write-only sink for feedback signals."""

    @abstractmethod
    def emit(self, signal: FeedbackSignal) -> None:
        """Deliver one signal. Must not raise."""
        pass


class NullFeedbackChannel(FeedbackChannel):
    """Discards every signal."""

    def emit(self, signal: FeedbackSignal) -> None:
        pass


class RecordingFeedbackChannel(FeedbackChannel):
    """Keeps emitted signals in order, for headless runs and tests."""

    def __init__(self):
        self.signals: list[FeedbackSignal] = []

    def emit(self, signal: FeedbackSignal) -> None:
        self.signals.append(signal)

    def drain(self) -> list[FeedbackSignal]:
        """Return and clear recorded signals."""
        signals = self.signals.copy()
        self.signals.clear()
        return signals
