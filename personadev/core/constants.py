"""
FILE: personadev/core/constants.py
PURPOSE: Constants used throughout the application
EXPORTS:
  - STORAGE_KEY: Key the AppState document is stored under
  - IMPORTANCE_LEVELS / DEFAULT_IMPORTANCE: Task and reminder importance
  - DEVICE_*: Device labels attached to pushes
  - ENVELOPE_*: Metadata envelope tags for exports
  - SHEET_*: Worksheet names and headers used by the relay
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - Single source of truth for wire-visible strings
"""

# Local storage
STORAGE_KEY = "personalDevData"

# Importance levels (tasks and reminders)
IMPORTANCE_LEVELS = ("low", "medium", "high")
DEFAULT_IMPORTANCE = "medium"

# Default targets (minutes)
DEFAULT_EXERCISE_TARGET = 30
DEFAULT_READING_TARGET = 30
DEFAULT_LANGUAGE_TARGET = 20
DEFAULT_REMINDER_TIME = "09:00"

# YouTube categories accepted for watch history entries
YOUTUBE_CATEGORIES = (
    "educational",
    "documentary",
    "news",
    "tutorial",
    "entertainment",
    "gaming",
    "music",
    "other",
)
DEFAULT_YOUTUBE_CATEGORY = "educational"

# Device labels
DEVICE_ANDROID = "android"
DEVICE_IOS = "ios"
DEVICE_MOBILE = "mobile"
DEVICE_WEB = "web"
DEVICE_LABELS = (DEVICE_ANDROID, DEVICE_IOS, DEVICE_MOBILE, DEVICE_WEB)

# Sync status display windows (seconds)
SUCCESS_DISPLAY_SECONDS = 3.0
ERROR_DISPLAY_SECONDS = 5.0

# Snapshot envelope
ENVELOPE_FORMAT = "PersonaDev"
ENVELOPE_VERSION = "2.0.0"
ENVELOPE_CREATOR = "PersonaDev"
EXPORT_FORMAT_JSON = "json"
EXPORT_FORMAT_PDEV = "pdev"
EXPORT_FORMATS = (EXPORT_FORMAT_JSON, EXPORT_FORMAT_PDEV)

# Relay worksheets
SHEET_APP_DATA = "PersonaDevData"
SHEET_SYNC_LOG = "SyncLog"
APP_DATA_HEADERS = ["Timestamp", "DataType", "JSONData"]
SYNC_LOG_HEADERS = ["Timestamp", "Action", "Device", "Status"]

# Relay row kinds
DATA_TYPE_FULL_SYNC = "FULL_SYNC"
DATA_TYPE_IMPORT = "IMPORT"
ACTION_SYNC = "SYNC"
ACTION_IMPORT = "IMPORT"
STATUS_SUCCESS = "SUCCESS"
