"""Pytest configuration and fixtures."""

import asyncio
import os
import sys
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from domains.reminders import MemoryKeyValueStore, ReminderEngine
from domains.reminders.types import PermissionStatus


class FakeClock:
    """Settable stand-in for datetime.now."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeNotifications:
    """Records every call the engine makes to the notification capability."""

    def __init__(self, permission=PermissionStatus.GRANTED):
        self.permission = permission
        self.request_result = permission
        self.calls: list[tuple] = []
        self.active: dict[str, tuple] = {}
        self.channels: dict[str, dict] = {}
        self.fail_schedule = False
        self.fail_cancel = False
        self._counter = 0

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    async def get_permission_status(self):
        self.calls.append(("get_permission_status",))
        return self.permission

    async def request_permission(self):
        self.calls.append(("request_permission",))
        self.permission = self.request_result
        return self.permission

    async def register_channel(self, channel_id, channel_config):
        self.calls.append(("register_channel", channel_id))
        self.channels[channel_id] = channel_config

    async def schedule_at(self, when, content):
        self.calls.append(("schedule_at", when, content))
        await asyncio.sleep(0)
        if self.fail_schedule:
            raise RuntimeError("platform rejected trigger")
        self._counter += 1
        handle = f"h{self._counter}"
        self.active[handle] = (when, content)
        return handle

    async def schedule_now(self, content):
        self.calls.append(("schedule_now", content))
        if self.fail_schedule:
            raise RuntimeError("platform rejected notice")
        self._counter += 1
        return f"now{self._counter}"

    async def cancel(self, handle):
        self.calls.append(("cancel", handle))
        await asyncio.sleep(0)
        if self.fail_cancel:
            raise RuntimeError("cancel failed")
        self.active.pop(handle, None)

    async def cancel_all(self):
        self.calls.append(("cancel_all",))
        self.active.clear()


class RecordingStore(MemoryKeyValueStore):
    """In-memory store that counts writes and can be made to fail."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.writes: list[str] = []
        self.fail_writes = False
        self.fail_reads = False

    async def get(self, key):
        if self.fail_reads:
            raise OSError("store unavailable")
        return await super().get(key)

    async def set(self, key, value):
        if self.fail_writes:
            raise OSError("disk full")
        self.writes.append(key)
        await super().set(key, value)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 1, 12, 0))


@pytest.fixture
def notifications():
    return FakeNotifications()


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def engine(notifications, store, clock):
    return ReminderEngine(notifications, store, clock=clock)


@pytest.fixture
def mock_httpx_client():
    """Create a mock httpx client."""
    with patch('httpx.AsyncClient') as mock:
        client = AsyncMock()
        mock.return_value.__aenter__.return_value = client
        yield client
