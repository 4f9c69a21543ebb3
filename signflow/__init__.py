"""Signflow: document approval and signature workflow service."""
