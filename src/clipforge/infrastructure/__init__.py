"""Infrastructure layer: configuration, external tools and I/O."""
