# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKDECK_APP_NAME": "App display name (default: taskdeck).",
    "TASKDECK_LOG_LEVEL": "Log file level (default: INFO). The console only shows warnings.",
    # Console
    "TASKDECK_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    "TASKDECK_DEFAULT_SORT": "Initial list order: date | status (default: date).",
    # Paths (gitignored)
    "TASKDECK_DATA_DIR": "Local data directory (default: .local/taskdeck).",
    "TASKDECK_TASKS_DB_PATH": "Task store SQLite path (default: <data_dir>/tasks.sqlite3).",
    "TASKDECK_STORAGE_KEY": "Key the task collection is stored under (default: @tasks).",
}
