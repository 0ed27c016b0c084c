"""Unit tests for cooperative cancellation primitives.

Covers idempotent cancel, cascade to children, late link of child after
parent cancel, raise_if_cancelled behavior, and close callbacks.
"""
from __future__ import annotations

import pytest

from bedrock_proxy.base.cancellation import (
    CancellationToken,
    CancelledError,
)


def test_cancel_cascades_to_children_and_is_idempotent():
    parent = CancellationToken()
    child1 = parent.child()
    child2 = parent.child()

    parent.cancel(reason="client disconnected")
    parent.cancel(reason="ignored")

    assert parent.cancelled is True and parent.reason == "client disconnected"  # nosec B101
    assert child1.cancelled is True and child1.reason == "client disconnected"  # nosec B101
    assert child2.cancelled is True  # nosec B101


def test_link_child_after_parent_cancel_immediately_cancels_child():
    parent = CancellationToken()
    parent.cancel("done")
    late_child = CancellationToken(parent=parent)
    assert late_child.cancelled is True and late_child.reason == "done"  # nosec B101


def test_raise_if_cancelled_uses_reason_or_default():
    token = CancellationToken()
    token.raise_if_cancelled()
    token.cancel()
    with pytest.raises(CancelledError, match="decode cancelled"):
        token.raise_if_cancelled()
    other = CancellationToken()
    other.cancel("terminate")
    with pytest.raises(CancelledError, match="terminate"):
        other.raise_if_cancelled()


def test_callbacks_run_once_on_cancel_and_can_be_removed():
    token = CancellationToken()
    calls = []
    token.add_callback(lambda: calls.append("close"))
    remove = token.add_callback(lambda: calls.append("removed"))
    remove()
    token.cancel()
    token.cancel()
    assert calls == ["close"]  # nosec B101


def test_callback_added_after_cancel_runs_immediately():
    token = CancellationToken()
    token.cancel()
    calls = []
    token.add_callback(lambda: calls.append(1))
    assert calls == [1]  # nosec B101


def test_failing_callback_does_not_block_children():
    parent = CancellationToken()
    child = parent.child()

    def broken() -> None:
        raise OSError("already closed")

    parent.add_callback(broken)
    parent.cancel("stop")
    assert child.cancelled  # nosec B101
