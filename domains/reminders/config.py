"""Reminder domain configuration - storage keys, timing and channel settings."""

# Persistent store keys, one independently serialized record each
ENABLED_KEY = "NOTIFICATIONS_ENABLED"
PREFS_KEY = "NOTIFICATION_PREFS"
PLANNED_KEY = "PLANNED_PAYMENTS"

# Trigger timing
REMINDER_HOUR = 9  # Local time-of-day every reminder fires at
DEFAULT_REMIND_BEFORE_DAYS = 1

# Entry defaults
DEFAULT_TITLE = "Payment"

# Category preferences applied when nothing is stored
DEFAULT_PREFERENCES = {
    "planned": True,
    "txAlerts": True,
    "loanReminders": True,
}

# Notification channel
CHANNEL_ID = "payments"
CHANNEL_CONFIG = {
    "name": "Payments & Finance",
    "importance": "high",
    "enable_vibrate": True,
    "vibration_pattern": [0, 250, 250, 250],
    "lockscreen_visibility": "public",
}

# Scheduler job ids for notifications carry this prefix so cancel-all
# leaves unrelated jobs (reconciliation) alone
JOB_PREFIX = "notif_"

# Periodic re-derivation of all schedules from the entry list
RECONCILE_INTERVAL_MINUTES = 60
RECONCILE_JOB_ID = "reminder_reconcile"

# Store HTTP timeout (seconds)
STORE_TIMEOUT = 10
