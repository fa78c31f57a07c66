"""Core domain layer: entities, interfaces, services and errors."""
