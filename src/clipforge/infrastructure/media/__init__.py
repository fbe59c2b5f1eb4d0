"""Media tooling: ffmpeg/ffprobe process handling, probing and derived assets."""

from .filter_graph import Filter, FilterChain, FilterGraph, StreamMapping, mapping_args
from .process_runner import ProcessResult, ToolRunner
from .prober import MediaProber
from .thumbnail_generator import ThumbnailGenerator
from .waveform import WaveformGenerator, compute_peaks

__all__ = [
    "Filter",
    "FilterChain",
    "FilterGraph",
    "StreamMapping",
    "mapping_args",
    "ProcessResult",
    "ToolRunner",
    "MediaProber",
    "ThumbnailGenerator",
    "WaveformGenerator",
    "compute_peaks",
]
