"""Domain modules for the finance reminder service."""
