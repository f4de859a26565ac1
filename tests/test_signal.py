"""Tests for the publish/subscribe signal."""

from __future__ import annotations

import logging

import pytest

from runecache.core.contracts.events import Signal


def test_first_listeners_run_before_existing_ones() -> None:
    signal: Signal[str] = Signal()
    calls: list[str] = []
    signal.connect(lambda event: calls.append(f"late:{event}"))
    signal.connect(lambda event: calls.append(f"first:{event}"), first=True)

    signal.emit("x")

    assert calls == ["first:x", "late:x"]


def test_failing_listener_is_logged_and_others_still_run(caplog: pytest.LogCaptureFixture) -> None:
    signal: Signal[int] = Signal()
    received: list[int] = []

    def _boom(event: int) -> None:
        raise RuntimeError("listener broke")

    signal.connect(_boom)
    signal.connect(received.append)

    with caplog.at_level(logging.ERROR, logger="runecache.core.contracts.events"):
        signal.emit(7)

    assert received == [7]
    assert "failed handling" in caplog.text


def test_disconnect_is_idempotent() -> None:
    signal: Signal[int] = Signal()
    disconnect = signal.connect(lambda event: None)

    disconnect()
    disconnect()

    assert len(signal) == 0
