"""Structured model of an ffmpeg filter graph.

Graphs are assembled from :class:`Filter` and :class:`FilterChain` objects and
serialized to ffmpeg's textual ``-filter_complex`` syntax only when a command
line is built. Float values always pass through :func:`format_seconds`, so no
literal with more than millisecond precision ever reaches the encoder.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from ...domain.value_objects.time_range import format_seconds


def _render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        return format_seconds(value)
    return str(value)


class Filter:
    """A single filter with positional and named options.

    Example:
        >>> Filter("trim", start=1.5, end=3.0).render()
        'trim=start=1.500:end=3.000'
    """

    def __init__(self, name: str, *args: Any, **options: Any):
        self.name = name
        self.args = args
        self.options = options

    def render(self) -> str:
        parts = [_render_value(arg) for arg in self.args]
        parts.extend(f"{key}={_render_value(value)}" for key, value in self.options.items())
        if not parts:
            return self.name
        return f"{self.name}={':'.join(parts)}"

    def __repr__(self) -> str:
        return f"Filter({self.render()!r})"


@dataclass
class FilterChain:
    """Linear chain of filters between labelled pads.

    ``inputs`` are stream specifiers or labels (``0:v``, ``vbase``) and
    ``output`` names the label the chain produces.
    """

    inputs: Sequence[str]
    filters: Sequence[Filter]
    output: str

    def render(self) -> str:
        pads = "".join(f"[{label}]" for label in self.inputs)
        body = ",".join(f.render() for f in self.filters)
        return f"{pads}{body}[{self.output}]"


@dataclass
class FilterGraph:
    """Ordered collection of filter chains."""

    chains: List[FilterChain] = field(default_factory=list)

    def add(
        self, inputs: Sequence[str], filters: Sequence[Filter], output: str
    ) -> str:
        """Append a chain and return its output label."""
        self.chains.append(FilterChain(list(inputs), list(filters), output))
        return output

    @property
    def is_empty(self) -> bool:
        return not self.chains

    def render(self) -> str:
        return ";".join(chain.render() for chain in self.chains)


@dataclass(frozen=True)
class StreamMapping:
    """Maps a graph output label or an input stream specifier to an output stream."""

    source: str
    from_graph: bool = True

    def as_arg(self) -> str:
        return f"[{self.source}]" if self.from_graph else self.source


def mapping_args(
    graph: Optional[FilterGraph], mappings: Sequence[StreamMapping]
) -> List[str]:
    """Build ``-filter_complex``/``-map`` arguments.

    Args:
        graph: Filter graph, or None for plain stream mapping
        mappings: Output streams in order

    Returns:
        Argument list ready to splice into an ffmpeg command
    """
    args: List[str] = []
    if graph is not None and not graph.is_empty:
        args.extend(["-filter_complex", graph.render()])
    for mapping in mappings:
        args.extend(["-map", mapping.as_arg()])
    return args
