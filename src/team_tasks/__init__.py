"""
Team task manager.

Packages:
- core: models, ports (storage/credential protocols), errors, app state
- storage: in-memory and SQLite implementations of the TeamStore port
- auth: password hashing, tokens, register/login helpers
- teams: domains and user preferences
- tasks: assignment engine, deadline monitor, task helpers
- cli / connectors: composition root, slash commands, console REPL
"""

__version__ = "0.1.0"
