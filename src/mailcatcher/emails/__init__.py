"""Captured email query API (list, fetch by id, clear)."""
