"""Cross-cutting helpers shared by every layer (enums, logging, time, ids)."""
