"""
Wizard step state machine.

Steps are an explicit enumeration and the wizard position is a tagged
state (``Editing``, ``Submitting``, ``Exited``).  ``transition`` is pure:
it takes the current state, an action and the gate's verdict for the
active step, and returns the outcome plus the next state.  The controller
performs the side effects (submission, navigation).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterable, List, Optional, Union


class WizardStep(IntEnum):
    ACCOUNT = 1
    PROFILE = 2
    GALLERY = 3
    ADMISSION = 4

    @property
    def key(self) -> str:
        """Name of the record sub-record edited on this step."""
        return _STEP_KEYS[self]

    @property
    def title(self) -> str:
        return _STEP_TITLES[self]

    @classmethod
    def from_key(cls, key: str) -> 'WizardStep':
        for step, step_key in _STEP_KEYS.items():
            if step_key == key:
                return step
        raise KeyError(key)

    @classmethod
    def first(cls) -> 'WizardStep':
        return cls.ACCOUNT

    @classmethod
    def last(cls) -> 'WizardStep':
        return cls.ADMISSION


_STEP_KEYS = {
    WizardStep.ACCOUNT: 'account_data',
    WizardStep.PROFILE: 'profile',
    WizardStep.GALLERY: 'business_gallery',
    WizardStep.ADMISSION: 'admission_test',
}

_STEP_TITLES = {
    WizardStep.ACCOUNT: 'Account data',
    WizardStep.PROFILE: 'Profile',
    WizardStep.GALLERY: 'Business Gallery',
    WizardStep.ADMISSION: 'Admission test',
}

STEP_KEYS = tuple(_STEP_KEYS.values())


# =============================================================================
# Wizard states
# =============================================================================

@dataclass(frozen=True)
class Editing:
    step: WizardStep


@dataclass(frozen=True)
class Submitting:
    """Final step passed; the record is being handed to the submitter."""


@dataclass(frozen=True)
class Exited:
    """User backed out of step 1; control returns to navigation."""


WizardState = Union[Editing, Submitting, Exited]


class Action(str, Enum):
    ADVANCE = 'advance'
    RETREAT = 'retreat'
    GO_TO = 'go_to'


class Outcome(str, Enum):
    MOVED = 'moved'
    BLOCKED = 'blocked'
    SUBMIT = 'submit'
    EXIT = 'exit'
    REJECTED = 'rejected'


@dataclass(frozen=True)
class Transition:
    outcome: Outcome
    state: WizardState


def transition(
    state: WizardState,
    action: Action,
    step_valid: bool = False,
    target: Optional[int] = None,
) -> Transition:
    """Compute the next wizard state.

    ``step_valid`` is the gate verdict for the active step and only matters
    for ``ADVANCE``.  ``GO_TO`` does not check prerequisites.
    """
    if not isinstance(state, Editing):
        return Transition(Outcome.REJECTED, state)

    step = state.step

    if action == Action.ADVANCE:
        if not step_valid:
            return Transition(Outcome.BLOCKED, state)
        if step == WizardStep.last():
            return Transition(Outcome.SUBMIT, Submitting())
        return Transition(Outcome.MOVED, Editing(WizardStep(step + 1)))

    if action == Action.RETREAT:
        if step == WizardStep.first():
            return Transition(Outcome.EXIT, Exited())
        return Transition(Outcome.MOVED, Editing(WizardStep(step - 1)))

    if action == Action.GO_TO:
        if target is None or not WizardStep.first() <= target <= WizardStep.last():
            return Transition(Outcome.REJECTED, state)
        return Transition(Outcome.MOVED, Editing(WizardStep(target)))

    raise ValueError(f"Unknown wizard action: {action}")


# =============================================================================
# Progress bar
# =============================================================================

class StepStatus(str, Enum):
    COMPLETE = 'complete'
    CURRENT = 'current'
    UPCOMING = 'upcoming'


@dataclass(frozen=True)
class StepIndicator:
    step: WizardStep
    status: StepStatus
    edited: bool = False

    @property
    def number(self) -> int:
        return int(self.step)

    @property
    def title(self) -> str:
        return self.step.title


def progress(current_step: int, edited: Iterable[str] = ()) -> List[StepIndicator]:
    """
    Per-step indicator: steps before the current one count as complete.

    ``edited`` holds sub-record names changed since the last render.
    """
    edited = set(edited)
    indicators = []
    for step in WizardStep:
        if step < current_step:
            status = StepStatus.COMPLETE
        elif step == current_step:
            status = StepStatus.CURRENT
        else:
            status = StepStatus.UPCOMING
        indicators.append(StepIndicator(step, status, step.key in edited))
    return indicators


def progress_percent(current_step: int) -> int:
    return round(current_step / len(WizardStep) * 100)
