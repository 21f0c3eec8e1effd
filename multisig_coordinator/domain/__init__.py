"""Domain layer: models, pure services and the error taxonomy."""
