"""ClipForge: media capture, clip assembly and range streaming."""

__version__ = "0.1.0"
