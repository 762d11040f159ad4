"""
Submission progress
Three named phases with fixed bounds; the value never goes back within one attempt
"""

import logging
from enum import Enum
from typing import Callable, Optional

from cityreport.core.constants import PROGRESS_LABELS, PROGRESS_PHASES
from cityreport.core.observable import StateCell

logger = logging.getLogger(__name__)


class SubmissionPhase(str, Enum):
    """Phases of one submission attempt."""
    PREPARING = "preparing"
    UPLOADING = "uploading"
    FINALIZING = "finalizing"

    @property
    def lower(self) -> float:
        return PROGRESS_PHASES[self.value][0]

    @property
    def upper(self) -> float:
        return PROGRESS_PHASES[self.value][1]

    @property
    def label(self) -> str:
        return PROGRESS_LABELS[self.value]


class SubmissionProgress:
    """
    Observable progress in [0, 1].

    `value` and `phase` are state cells the UI subscribes to. Entering a phase
    moves the value to that phase's upper bound.
    """

    def __init__(self):
        self.value: StateCell[float] = StateCell(0.0)
        self.phase: StateCell[Optional[SubmissionPhase]] = StateCell(None)

    @property
    def current(self) -> float:
        return self.value.value

    def reset(self) -> None:
        """Start a new attempt at 0."""
        self.phase.set(None)
        self.value.set(0.0)

    def enter(self, phase: SubmissionPhase) -> None:
        """Switch to a phase and report its target progress."""
        logger.debug(f"Submission phase: {phase.value}")
        self.phase.set(phase)
        self.advance(phase.upper)

    def advance(self, value: float) -> None:
        """Raise progress to `value`; lower values are ignored."""
        value = min(max(value, 0.0), 1.0)
        if value > self.value.value:
            self.value.set(value)

    def subscribe(self, callback: Callable[[float], None]) -> Callable[[], None]:
        return self.value.subscribe(callback)
