"""Named state transitions for contracts and forklifts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Iterable, Optional, TypeVar

from forklift_rental.domain.models import (
    ContractStatus,
    ForkliftManagementStatus,
    ForkliftOperationStatus,
)
from forklift_rental.services.errors import InvalidTransitionError

S = TypeVar("S", bound=Enum)


@dataclass(frozen=True)
class Transition(Generic[S]):
    name: str
    sources: frozenset[Optional[S]]
    target: S


class StateMachine(Generic[S]):
    """A fixed table of named transitions over one status enum."""

    def __init__(self, field: str, transitions: Iterable[Transition[S]]) -> None:
        self.field = field
        self._transitions = {transition.name: transition for transition in transitions}

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._transitions)

    def available(self, state: Optional[S]) -> list[str]:
        return [
            name
            for name, transition in self._transitions.items()
            if state in transition.sources
        ]

    def can_apply(self, state: Optional[S], name: str) -> bool:
        transition = self._transitions.get(name)
        return transition is not None and state in transition.sources

    def apply(self, state: Optional[S], name: str) -> S:
        """Return the target state, or raise InvalidTransitionError."""
        transition = self._transitions.get(name)
        if transition is None:
            raise InvalidTransitionError(
                f"Unknown {self.field} transition: {name!r}.", field=self.field
            )
        if state not in transition.sources:
            current = state.value if state is not None else "none"
            raise InvalidTransitionError(
                f"Cannot {name} when {self.field} is {current}.", field=self.field
            )
        return transition.target


def _states(*states: Optional[S]) -> frozenset[Optional[S]]:
    return frozenset(states)


_C = ContractStatus

CONTRACT_TRANSITIONS: StateMachine[ContractStatus] = StateMachine(
    "status",
    [
        Transition("extend", _states(_C.RENTING), _C.RENTING),
        Transition("hold", _states(_C.RENTING), _C.ON_HOLD),
        Transition("resume", _states(_C.ON_HOLD), _C.RENTING),
        Transition(
            "terminate", _states(_C.RENTING, _C.ON_HOLD), _C.MID_TERM_TERMINATION
        ),
        Transition("end", _states(_C.RENTING, _C.ON_HOLD), _C.CONTRACT_ENDED),
        Transition(
            "await_recovery",
            _states(_C.RENTING, _C.ON_HOLD, _C.MID_TERM_TERMINATION),
            _C.AWAITING_RECOVERY,
        ),
        Transition("recover", _states(_C.AWAITING_RECOVERY), _C.CONTRACT_ENDED),
    ],
)

_M = ForkliftManagementStatus

FORKLIFT_MANAGEMENT_TRANSITIONS: StateMachine[ForkliftManagementStatus] = (
    StateMachine(
        "management_status",
        [
            Transition("rent", _states(_M.IN_STORAGE), _M.RENTED),
            Transition("lend", _states(_M.IN_STORAGE), _M.ON_LOAN),
            Transition(
                "send_to_repair",
                _states(
                    _M.IN_STORAGE,
                    _M.RENTED,
                    _M.ON_LOAN,
                    _M.PART_REPLACEMENT,
                    _M.OVERDUE_RECOVERY,
                ),
                _M.UNDER_REPAIR,
            ),
            Transition(
                "replace_part",
                _states(_M.IN_STORAGE, _M.RENTED, _M.ON_LOAN, _M.UNDER_REPAIR),
                _M.PART_REPLACEMENT,
            ),
            Transition(
                "flag_overdue_recovery",
                _states(_M.RENTED, _M.ON_LOAN),
                _M.OVERDUE_RECOVERY,
            ),
            Transition(
                "store",
                _states(
                    _M.RENTED,
                    _M.ON_LOAN,
                    _M.UNDER_REPAIR,
                    _M.PART_REPLACEMENT,
                    _M.OVERDUE_RECOVERY,
                ),
                _M.IN_STORAGE,
            ),
            Transition(
                "dispose",
                _states(
                    _M.IN_STORAGE,
                    _M.UNDER_REPAIR,
                    _M.PART_REPLACEMENT,
                    _M.OVERDUE_RECOVERY,
                ),
                _M.DISPOSED,
            ),
        ],
    )
)

_O = ForkliftOperationStatus

FORKLIFT_OPERATION_TRANSITIONS: StateMachine[ForkliftOperationStatus] = StateMachine(
    "operation_status",
    [
        Transition(
            "remote_start",
            _states(None, _O.CHECKING, _O.STOPPED, _O.REMOTE_STOPPED),
            _O.OPERATING,
        ),
        Transition(
            "remote_stop",
            _states(None, _O.CHECKING, _O.OPERATING, _O.UNAVAILABLE),
            _O.REMOTE_STOPPED,
        ),
        Transition(
            "check",
            _states(None, _O.UNAVAILABLE, _O.OPERATING, _O.STOPPED, _O.REMOTE_STOPPED),
            _O.CHECKING,
        ),
        Transition(
            "mark_unavailable",
            _states(None, _O.CHECKING, _O.OPERATING, _O.STOPPED, _O.REMOTE_STOPPED),
            _O.UNAVAILABLE,
        ),
        Transition("stop", _states(_O.OPERATING), _O.STOPPED),
    ],
)
