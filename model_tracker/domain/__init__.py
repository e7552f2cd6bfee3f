"""Domain layer: tracking entities, provider interfaces and errors."""
