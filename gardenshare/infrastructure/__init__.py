"""Infrastructure layer: configuration, persistence and logging."""
