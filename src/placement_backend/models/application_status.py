"""Application status graph and the lookup tables that hang off it.

The allowed edges live in one place; anything that needs to know whether a
status change, a withdrawal or a timestamp applies reads these tables.
"""

from enum import Enum
from typing import Dict, FrozenSet, Union

from placement_backend.core.error_handling import ValidationError


class ApplicationStatus(str, Enum):
    """Lifecycle states of an application."""
    APPLIED = "applied"
    SHORTLISTED = "shortlisted"
    ON_HOLD = "on-hold"
    REJECTED = "rejected"
    SELECTED = "selected"


class ActorType(str, Enum):
    """Who performed a status transition."""
    USER = "USER"
    SYSTEM = "SYSTEM"


INITIAL_STATUS = ApplicationStatus.APPLIED

ALLOWED_TRANSITIONS: Dict[ApplicationStatus, FrozenSet[ApplicationStatus]] = {
    ApplicationStatus.APPLIED: frozenset({
        ApplicationStatus.SHORTLISTED,
        ApplicationStatus.ON_HOLD,
        ApplicationStatus.REJECTED,
    }),
    ApplicationStatus.SHORTLISTED: frozenset({
        ApplicationStatus.SELECTED,
        ApplicationStatus.REJECTED,
    }),
    ApplicationStatus.ON_HOLD: frozenset({
        ApplicationStatus.SHORTLISTED,
        ApplicationStatus.REJECTED,
    }),
    ApplicationStatus.REJECTED: frozenset(),
    ApplicationStatus.SELECTED: frozenset(),
}

TERMINAL_STATUSES: FrozenSet[ApplicationStatus] = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)

# Students may pull out only before a decision has been made
WITHDRAWABLE_STATUSES: FrozenSet[ApplicationStatus] = frozenset({
    ApplicationStatus.APPLIED,
    ApplicationStatus.ON_HOLD,
})

# Set once, on the first transition into the status
FIRST_REACHED_TIMESTAMPS: Dict[ApplicationStatus, str] = {
    ApplicationStatus.SHORTLISTED: "shortlisted_at",
    ApplicationStatus.SELECTED: "selected_at",
    ApplicationStatus.REJECTED: "rejected_at",
}

STATUS_LABELS: Dict[ApplicationStatus, str] = {
    ApplicationStatus.APPLIED: "Applied",
    ApplicationStatus.SHORTLISTED: "Shortlisted",
    ApplicationStatus.ON_HOLD: "On Hold",
    ApplicationStatus.REJECTED: "Rejected",
    ApplicationStatus.SELECTED: "Selected",
}


def parse_status(value: Union[str, ApplicationStatus]) -> ApplicationStatus:
    """Coerce a raw value into an :class:`ApplicationStatus`.
    
    Raises:
        ValidationError: If the value is not a known status
    """
    if isinstance(value, ApplicationStatus):
        return value
    try:
        return ApplicationStatus(value)
    except ValueError:
        valid = ", ".join(status.value for status in ApplicationStatus)
        raise ValidationError(
            f"Invalid status: {value}. Must be one of: {valid}",
            field="status",
            value=value
        )


def allowed_targets(current: Union[str, ApplicationStatus]) -> FrozenSet[ApplicationStatus]:
    """Statuses reachable in one step from ``current``."""
    return ALLOWED_TRANSITIONS[parse_status(current)]


def is_transition_allowed(
    current: Union[str, ApplicationStatus],
    target: Union[str, ApplicationStatus]
) -> bool:
    return parse_status(target) in allowed_targets(current)


def is_terminal(status: Union[str, ApplicationStatus]) -> bool:
    return parse_status(status) in TERMINAL_STATUSES


def can_withdraw(status: Union[str, ApplicationStatus]) -> bool:
    return parse_status(status) in WITHDRAWABLE_STATUSES


def status_label(status: Union[str, ApplicationStatus]) -> str:
    """Human readable label, falling back to the raw value."""
    try:
        return STATUS_LABELS[ApplicationStatus(status)]
    except ValueError:
        return str(status)
