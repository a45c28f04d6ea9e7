"""
Declarative state machines for request workflows and retryable messages.

    class MessageLifecycle(StateMachine):
        initial = "sending"
        transitions = [
            Transition("sending", "sent"),
            Transition("sending", "failed"),
            Transition("failed", "sending"),
        ]

    MessageLifecycle.validate_transition("failed", "sending")   # ok
    MessageLifecycle.can_transition("sent", "sending")          # False
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Transition:
    """A single state machine edge."""
    from_state: str
    to_state: str


class InvalidTransition(Exception):
    """Raised when the transition edge does not exist."""

    def __init__(self, from_state, to_state, allowed):
        self.from_state = from_state
        self.to_state = to_state
        self.allowed = allowed
        super().__init__(
            f"Cannot transition from '{from_state}' to '{to_state}'. "
            f"Allowed: {allowed}"
        )


class StateMachine:
    """
    Base class for declarative state machines.

    Subclass and define:
        initial: str                    — the starting state
        transitions: list[Transition]   — list of Transition edges
    """

    initial: str = None
    transitions: List[Transition] = []

    @classmethod
    def get_transition(cls, from_state, to_state):
        """Return the Transition object for this edge, or None."""
        for t in cls.transitions:
            if t.from_state == from_state and t.to_state == to_state:
                return t
        return None

    @classmethod
    def can_transition(cls, from_state, to_state) -> bool:
        return cls.get_transition(from_state, to_state) is not None

    @classmethod
    def validate_transition(cls, from_state, to_state):
        """Return the Transition object, or raise InvalidTransition."""
        t = cls.get_transition(from_state, to_state)
        if t is None:
            raise InvalidTransition(from_state, to_state, cls.allowed_transitions(from_state))
        return t

    @classmethod
    def allowed_transitions(cls, from_state):
        """Return list of valid next state names from from_state."""
        return [t.to_state for t in cls.transitions if t.from_state == from_state]


class WorkflowLifecycle(StateMachine):
    """One effect workflow instance: runs once, then settles or is superseded."""
    initial = "RUNNING"
    transitions = [
        Transition("RUNNING", "SUCCESS"),
        Transition("RUNNING", "ERROR"),
        Transition("RUNNING", "CANCELLED"),
    ]


class MessageLifecycle(StateMachine):
    """A retryable outbound message."""
    initial = "sending"
    transitions = [
        Transition("sending", "sent"),
        Transition("sending", "failed"),
        Transition("failed", "sending"),
    ]
