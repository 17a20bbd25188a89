"""Core implementations: blob store, migration, backups, retention, paths."""
