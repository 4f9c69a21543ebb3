"""Application layer: DTOs, ports, pure services and workflow use cases."""
