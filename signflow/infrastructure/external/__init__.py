"""Adapters for collaborators outside the database (files, PDF rendering)."""
