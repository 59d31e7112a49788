"""Load and save reminder state through a key-value store.

The in-memory copy is authoritative for the running process. Every
function here absorbs store failures: loads fall back to defaults, saves
report False.
"""

import json

from logger import logger
from . import config
from .store import KeyValueStore
from .types import GlobalState, PlannedEntry


async def _read(store: KeyValueStore, key: str):
    try:
        return await store.get(key)
    except Exception as e:
        logger.error(f"Failed to read {key} from store: {e}")
        return None


async def _write(store: KeyValueStore, key: str, value: str) -> bool:
    try:
        await store.set(key, value)
        return True
    except Exception as e:
        logger.error(f"Failed to persist {key}: {e}")
        return False


def decode_enabled(raw) -> bool:
    if raw is None:
        return True
    return str(raw).strip().lower() == "true"


def decode_preferences(raw) -> dict[str, bool]:
    """Stored preferences merged over the defaults."""
    prefs = dict(config.DEFAULT_PREFERENCES)
    if not raw:
        return prefs
    try:
        stored = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Stored notification preferences are malformed, using defaults")
        return prefs
    if isinstance(stored, dict):
        prefs.update({k: v for k, v in stored.items() if isinstance(v, bool)})
    return prefs


def decode_entries(raw) -> list[PlannedEntry]:
    """Planned entries from their stored JSON array.

    Unreadable records are skipped rather than failing the whole list.
    """
    if not raw:
        return []
    try:
        records = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Stored planned payments are malformed, starting empty")
        return []
    if not isinstance(records, list):
        return []

    entries = []
    for record in records:
        try:
            entries.append(PlannedEntry.from_dict(record))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Skipping unreadable planned payment {record!r}: {e}")
    return entries


async def load_state(store: KeyValueStore) -> tuple[GlobalState, list[PlannedEntry]]:
    """Read the three reminder records, applying defaults where absent.

    Returns:
        (global state, planned entries newest first)
    """
    raw_enabled = await _read(store, config.ENABLED_KEY)
    raw_prefs = await _read(store, config.PREFS_KEY)
    raw_entries = await _read(store, config.PLANNED_KEY)

    state = GlobalState(
        is_enabled=decode_enabled(raw_enabled),
        preferences=decode_preferences(raw_prefs),
    )
    entries = decode_entries(raw_entries)
    logger.info(
        f"Loaded reminder state: enabled={state.is_enabled}, "
        f"{len(entries)} planned payment(s)"
    )
    return state, entries


async def save_enabled(store: KeyValueStore, is_enabled: bool) -> bool:
    return await _write(store, config.ENABLED_KEY, "true" if is_enabled else "false")


async def save_preferences(store: KeyValueStore, preferences: dict[str, bool]) -> bool:
    return await _write(store, config.PREFS_KEY, json.dumps(preferences))


async def save_entries(store: KeyValueStore, entries: list[PlannedEntry]) -> bool:
    return await _write(store, config.PLANNED_KEY, json.dumps([e.to_dict() for e in entries]))
