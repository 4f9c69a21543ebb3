"""Infrastructure adapters: persistence, storage, PDF rendering, mail, security."""
