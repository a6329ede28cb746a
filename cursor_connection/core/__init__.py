"""Core pagination, database binding, settings and exceptions."""
