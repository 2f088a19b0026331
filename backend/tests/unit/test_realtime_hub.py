"""
Unit tests for the realtime push hub.
"""

import asyncio

import pytest

from services.realtime_hub import RealtimeHub


class FakeWebSocket:
    def __init__(self, fail: bool = False):
        self.accepted = False
        self.sent = []
        self.fail = fail

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("connection closed")
        self.sent.append(message)


class TestRealtimeHub:
    @pytest.mark.asyncio
    async def test_send_reaches_every_session_of_the_user(self):
        hub = RealtimeHub()
        first, second, other = FakeWebSocket(), FakeWebSocket(), FakeWebSocket()
        await hub.connect(first, 1)
        await hub.connect(second, 1)
        await hub.connect(other, 2)

        delivered = await hub.send(1, "newNotification", {"id": 5})

        assert delivered == 2
        assert first.accepted and second.accepted
        assert first.sent == [{"event": "newNotification", "data": {"id": 5}}]
        assert other.sent == []

    @pytest.mark.asyncio
    async def test_dead_sessions_are_dropped(self):
        hub = RealtimeHub()
        dead = FakeWebSocket(fail=True)
        await hub.connect(dead, 1)

        assert await hub.send(1, "newNotification", {}) == 0
        assert hub.is_connected(1) is False

    @pytest.mark.asyncio
    async def test_disconnect(self):
        hub = RealtimeHub()
        ws = FakeWebSocket()
        await hub.connect(ws, 3)
        await hub.disconnect(ws, 3)

        assert hub.is_connected(3) is False
        assert await hub.send(3, "newNotification", {}) == 0

    @pytest.mark.asyncio
    async def test_emit_schedules_send_on_bound_loop(self):
        hub = RealtimeHub()
        hub.bind_loop(asyncio.get_running_loop())
        ws = FakeWebSocket()
        await hub.connect(ws, 4)

        assert hub.emit(4, "appointmentStatusChanged", {"appointment_id": 9, "status": "completed"}) is True
        await asyncio.sleep(0.05)

        assert ws.sent == [{
            "event": "appointmentStatusChanged",
            "data": {"appointment_id": 9, "status": "completed"},
        }]

    def test_emit_without_session_is_a_no_op(self):
        assert RealtimeHub().emit(99, "newNotification", {}) is False
