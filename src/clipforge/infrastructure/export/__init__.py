"""Clip export: per-clip normalization and lossless concatenation."""

from .clip_pipeline import ClipExportPipeline, ClipFilterGraphBuilder, build_manifest

__all__ = ["ClipExportPipeline", "ClipFilterGraphBuilder", "build_manifest"]
