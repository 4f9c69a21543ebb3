"""Domain layer: workflow states, identities, stamp geometry and exceptions."""
