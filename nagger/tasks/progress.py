"""Completion percentages and progress notes."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True, slots=True)
class Completion:
    """Integer percentage between 0 and 100.

    Addition saturates at 100 and subtraction floors at 0.
    """

    value: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 100:
            raise ValueError(f"completion must be between 0 and 100, got {self.value}")

    @classmethod
    def zero(cls) -> "Completion":
        return cls(0)

    @classmethod
    def full(cls) -> "Completion":
        return cls(100)

    @property
    def is_complete(self) -> bool:
        return self.value == 100

    def __add__(self, other: "Completion") -> "Completion":
        return Completion(min(100, self.value + other.value))

    def __sub__(self, other: "Completion") -> "Completion":
        return Completion(max(0, self.value - other.value))

    def __str__(self) -> str:
        return f"{self.value}%"


@dataclass(slots=True)
class ProgressNote:
    """Free-text note on a task, optionally claiming some completion."""

    note: str
    completed: Optional[Completion] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def with_completion(cls, note: str, percent: int) -> "ProgressNote":
        return cls(note=note, completed=Completion(percent))

    def reset_completion(self) -> None:
        self.completed = None

    def to_dict(self) -> dict:
        return {
            "note": self.note,
            "completed": self.completed.value if self.completed else None,
            "timestamp": self.timestamp.isoformat(),
        }
