"""HTTP API for the ClipForge media core."""
