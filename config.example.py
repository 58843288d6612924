# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a
local .env file next to where tasktogo is started). Command line flags
(-l/--list, --color/--no-color) override the matching values.

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKTOGO_APP_NAME": "App display name (default: tasktogo).",
    "TASKTOGO_LOG_LEVEL": "Console logging level (default: WARNING; the log file gets DEBUG).",
    "TASKTOGO_DATA_DIR": "Directory for tasktogo.log (default: ~/.local/state/tasktogo).",
    # Task list
    "TASKTOGO_LIST_PATH": "Task list JSON file (default: ~/.tasktogo).",
    "TASKTOGO_MAX_LIST_ITEMS": "Default number of tasks shown by `list` (default: 0 = all).",
    # Rendering
    "TASKTOGO_COLORS": "Colorize listings by urgency (true/false, default: true).",
    "TASKTOGO_DUE_FORMAT": "strftime format for due dates more than a week away.",
    "TASKTOGO_COLOR_THRESHOLD_HOURS": "Hours per color step for dated tasks (default: 24).",
}
