"""Store adapters for persistence and querying.

- SQLite (zero-config, single-file)
"""
