"""Key-value stores backing the reminder state.

All stores expose the same two coroutines:

    await store.get(key) -> str | None
    await store.set(key, value)

and raise on I/O failure. Callers decide what a failure means.
"""

import asyncio
import json
from pathlib import Path
from typing import Optional, Protocol

import httpx

from config import SUPABASE_URL, SUPABASE_KEY, REMINDER_STORE_PATH
from logger import logger
from . import config


class KeyValueStore(Protocol):
    """String key-value persistence."""

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...


class MemoryKeyValueStore:
    """Process-local store, for in-memory only operation."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore:
    """All keys in one JSON object on disk.

    File I/O runs in a worker thread so the event loop is not blocked.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, encoding="utf-8") as f:
            content = f.read()
        if not content.strip():
            return {}
        data = json.loads(content)
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        tmp.replace(self.path)

    async def get(self, key: str) -> Optional[str]:
        data = await asyncio.to_thread(self._read_all)
        value = data.get(key)
        return None if value is None else str(value)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read_all)
            data[key] = value
            await asyncio.to_thread(self._write_all, data)


class SupabaseKeyValueStore:
    """Supabase REST table `reminder_kv` with columns (key text primary key, value text)."""

    def __init__(self, url: str, api_key: str, table: str = "reminder_kv"):
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.table = table

    def _headers(self) -> dict:
        """Get headers for Supabase API calls."""
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Prefer": "resolution=merge-duplicates,return=minimal"
        }

    async def get(self, key: str) -> Optional[str]:
        async with httpx.AsyncClient() as client:
            response = await client.get(
                f"{self.url}/rest/v1/{self.table}",
                params={"key": f"eq.{key}", "select": "value"},
                headers=self._headers(),
                timeout=config.STORE_TIMEOUT
            )
            response.raise_for_status()
            rows = response.json()
        if not rows:
            return None
        return rows[0].get("value")

    async def set(self, key: str, value: str) -> None:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{self.url}/rest/v1/{self.table}",
                headers=self._headers(),
                json={"key": key, "value": value},
                timeout=config.STORE_TIMEOUT
            )
            response.raise_for_status()
        logger.debug(f"Stored {key} in Supabase")


def create_store() -> KeyValueStore:
    """Pick the configured store: Supabase when credentials exist, else the JSON file."""
    if SUPABASE_URL and SUPABASE_KEY:
        logger.info("Using Supabase for reminder persistence")
        return SupabaseKeyValueStore(SUPABASE_URL, SUPABASE_KEY)

    logger.info(f"Supabase not configured, persisting reminders to {REMINDER_STORE_PATH}")
    return JsonFileStore(REMINDER_STORE_PATH)
