"""Global configuration for the finance reminder service."""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

_DATA_DIR = Path(os.getenv("LOCALAPPDATA", ".")) / "finance-reminders"

# Supabase (optional key-value persistence)
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

# Local JSON store, used when Supabase is not configured
REMINDER_STORE_PATH = Path(os.getenv("REMINDER_STORE_PATH", str(_DATA_DIR / "store.json")))

# Webhook that receives fired notifications (Discord-compatible payload)
NOTIFY_WEBHOOK_URL = os.getenv("NOTIFY_WEBHOOK_URL")

# Initial permission of the local notification capability: granted | denied | undetermined
NOTIFICATION_PERMISSION = os.getenv("NOTIFICATION_PERMISSION", "undetermined")

# Shown before amounts in notification bodies
CURRENCY_LABEL = os.getenv("CURRENCY_LABEL", "LKR")

# Logging
LOG_DIR = _DATA_DIR / "logs"
LOG_DIR.mkdir(parents=True, exist_ok=True)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
