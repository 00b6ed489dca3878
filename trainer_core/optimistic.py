"""
Finite state machine for optimistic-update-with-rollback.

Every local change that is applied before the backend confirms it goes
through the same phases:

    IDLE -> OPTIMISTIC -> COMMITTED | ROLLED_BACK | SUPERSEDED

COMMITTED, ROLLED_BACK and SUPERSEDED are terminal, so the revert callback
runs at most once per update. SUPERSEDED marks an update whose result was
invalidated by a newer call of the same kind and must not touch state.

Usage:
    update = OptimisticUpdate("presence:online", apply=show_online, revert=show_committed)
    update.apply()
    ...await backend...
    update.commit()  # or update.roll_back()
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from trainer_core.errors import IllegalPhaseError

logger = logging.getLogger(__name__)


class UpdatePhase(str, Enum):
    """All phases of an optimistic update."""
    IDLE = "idle"
    OPTIMISTIC = "optimistic"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    SUPERSEDED = "superseded"


class UpdateTrigger(str, Enum):
    """Events that move an update between phases."""
    APPLY = "apply"
    CONFIRM = "confirm"
    FAIL = "fail"
    SUPERSEDE = "supersede"


@dataclass
class PhaseTransition:
    """A single valid phase transition."""
    from_phase: UpdatePhase
    to_phase: UpdatePhase
    trigger: UpdateTrigger


@dataclass
class PhaseEntry:
    """Recorded history entry for a phase visit."""
    phase: UpdatePhase
    entered_at: datetime
    trigger: Optional[UpdateTrigger] = None


TERMINAL_PHASES = frozenset(
    {UpdatePhase.COMMITTED, UpdatePhase.ROLLED_BACK, UpdatePhase.SUPERSEDED}
)


class OptimisticUpdate:
    """
    One optimistic change and its confirm or rollback.

    ``apply`` is called on APPLY; ``revert`` is called on FAIL and nowhere
    else. CONFIRM and SUPERSEDE only record the outcome.
    """

    TRANSITIONS: list[PhaseTransition] = [
        PhaseTransition(UpdatePhase.IDLE, UpdatePhase.OPTIMISTIC, UpdateTrigger.APPLY),
        PhaseTransition(UpdatePhase.OPTIMISTIC, UpdatePhase.COMMITTED, UpdateTrigger.CONFIRM),
        PhaseTransition(UpdatePhase.OPTIMISTIC, UpdatePhase.ROLLED_BACK, UpdateTrigger.FAIL),
        PhaseTransition(UpdatePhase.OPTIMISTIC, UpdatePhase.SUPERSEDED, UpdateTrigger.SUPERSEDE),
    ]

    def __init__(
        self,
        label: str,
        apply: Callable[[], None],
        revert: Callable[[], None],
    ) -> None:
        self.label = label
        self._apply = apply
        self._revert = revert
        self._phase = UpdatePhase.IDLE
        self._history: list[PhaseEntry] = [
            PhaseEntry(phase=UpdatePhase.IDLE, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def phase(self) -> UpdatePhase:
        return self._phase

    def apply(self) -> None:
        self._fire(UpdateTrigger.APPLY)
        self._apply()

    def commit(self) -> None:
        self._fire(UpdateTrigger.CONFIRM)

    def roll_back(self) -> None:
        self._fire(UpdateTrigger.FAIL)
        self._revert()

    def supersede(self) -> None:
        self._fire(UpdateTrigger.SUPERSEDE)

    def _fire(self, trigger: UpdateTrigger) -> UpdatePhase:
        """
        Execute a phase transition.

        Raises:
            IllegalPhaseError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_phase == self._phase and t.trigger == trigger:
                old_phase = self._phase
                self._phase = t.to_phase
                self._history.append(PhaseEntry(
                    phase=self._phase,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))
                logger.debug(
                    "%s: %s -> %s (trigger: %s)",
                    self.label, old_phase.value, self._phase.value, trigger.value,
                )
                return self._phase

        valid = [t.trigger.value for t in self.TRANSITIONS if t.from_phase == self._phase]
        raise IllegalPhaseError(
            f"{self.label}: no transition from '{self._phase.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_history(self) -> list[PhaseEntry]:
        return list(self._history)

    def get_phase_trace(self) -> list[str]:
        return [entry.phase.value for entry in self._history]

    def is_terminal(self) -> bool:
        return self._phase in TERMINAL_PHASES
