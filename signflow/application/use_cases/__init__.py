"""Application use cases (workflow and group administration)."""
