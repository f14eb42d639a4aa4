"""
TeamStore implementations.

- memory_store.py: dict-backed store (default; lost on exit)
- sqlite_store.py: SQLite-backed store
- seed.py: demo data for an empty store
"""
