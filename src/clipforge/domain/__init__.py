"""Domain layer: entities, value objects and errors of the media core."""
