# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets (TEAM_TASKS_JWT_SECRET belongs in .env, which is gitignored).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TEAM_TASKS_APP_NAME": "App display name, also used as the console prompt (default: team-tasks).",
    "TEAM_TASKS_LOG_LEVEL": "Console logging level (default: INFO).",
    # Connectors
    "TEAM_TASKS_CONSOLE_ENABLED": "Enable the console connector (true/false, default: true).",
    # Storage (paths are gitignored)
    "TEAM_TASKS_DATA_DIR": "Local data directory for logs and the database (default: .local/team_tasks).",
    "TEAM_TASKS_STORAGE_BACKEND": "memory or sqlite (default: memory).",
    "TEAM_TASKS_DB_PATH": "SQLite path (default: <data_dir>/team_tasks.sqlite3).",
    "TEAM_TASKS_SEED_DEMO_DATA": "Seed the demo lead, domains and members into an empty store (default: true).",
    # Deadline monitor
    "TEAM_TASKS_MONITOR_ENABLED": "Run the background overdue-task sweep (default: true).",
    "TEAM_TASKS_MONITOR_INTERVAL_SECONDS": "Seconds between sweeps (default: 60).",
    # Credentials
    "TEAM_TASKS_JWT_SECRET": (
        "HS256 signing secret; JWT_SECRET is accepted too. "
        "When unset a per-process secret is generated and sessions die on restart."
    ),
    "TEAM_TASKS_TOKEN_TTL_HOURS": "Session token lifetime in hours (default: 24).",
    "TEAM_TASKS_BCRYPT_ROUNDS": "bcrypt cost factor, clamped to 4..31 (default: 12).",
}
