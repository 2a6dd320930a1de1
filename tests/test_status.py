"""Order status DAG: forward steps, cancellation exits and terminal sinks."""

import pytest

from foodexpress.domain.errors import InvalidStatus, TerminalStateViolation
from foodexpress.domain.status import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    OrderStatus,
    check_transition,
    parse_status,
)

FORWARD = [
    ("pending", "confirmed"),
    ("confirmed", "preparing"),
    ("preparing", "ready"),
    ("ready", "out_for_delivery"),
    ("out_for_delivery", "delivered"),
]


@pytest.mark.parametrize("current,target", FORWARD)
def test_forward_step_is_allowed(current, target):
    assert check_transition(current, target) == OrderStatus(target)


@pytest.mark.parametrize(
    "current", ["pending", "confirmed", "preparing", "ready", "out_for_delivery"]
)
def test_cancel_from_any_non_terminal_state(current):
    assert check_transition(current, "cancelled") == OrderStatus.CANCELLED


def test_skipping_a_step_is_rejected():
    with pytest.raises(InvalidStatus):
        check_transition("pending", "preparing")


def test_backward_step_is_rejected():
    with pytest.raises(InvalidStatus):
        check_transition("ready", "preparing")


def test_self_transition_is_rejected():
    with pytest.raises(InvalidStatus):
        check_transition("pending", "pending")


@pytest.mark.parametrize("target", [s.value for s in OrderStatus])
def test_delivered_is_terminal(target):
    with pytest.raises(TerminalStateViolation):
        check_transition("delivered", target)


@pytest.mark.parametrize("target", ["pending", "confirmed", "cancelled"])
def test_cancelled_is_terminal(target):
    with pytest.raises(TerminalStateViolation):
        check_transition("cancelled", target)


def test_unknown_status_is_invalid():
    with pytest.raises(InvalidStatus):
        parse_status("refunded")
    with pytest.raises(InvalidStatus):
        check_transition("pending", "shipped")


def test_no_transition_ever_reenters_pending():
    for current, targets in ALLOWED_TRANSITIONS.items():
        assert OrderStatus.PENDING not in targets


def test_terminal_states_have_no_exits():
    for status in TERMINAL_STATUSES:
        assert ALLOWED_TRANSITIONS[status] == frozenset()
