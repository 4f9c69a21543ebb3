"""Immutable DTOs passed between use cases, repositories and the API layer."""
