from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Sequence

from tinycss2.ast import Node


@dataclass(frozen=True, slots=True)
class ParsedStylesheet:
    """
    One parsed source. `reference` is the literal path or URL it came from.
    """

    reference: str
    nodes: tuple[Node, ...]
    text: str
    is_url: bool = False


@dataclass(frozen=True, slots=True)
class SourcedNode:
    """A top-level node tagged with the reference of the sheet it came from."""

    source: str
    node: Node


@dataclass(frozen=True, slots=True)
class Stylesheet:
    """
    The merged tree handed through the transform pipeline.

    `sources` keeps every input in input order (for source maps);
    `nodes` is the flat, ordered list of top-level nodes.
    """

    sources: tuple[ParsedStylesheet, ...] = ()
    nodes: tuple[SourcedNode, ...] = ()
    _by_reference: dict[str, ParsedStylesheet] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        self._by_reference.update((s.reference, s) for s in self.sources)

    @classmethod
    def from_parsed(cls, parsed: ParsedStylesheet) -> Stylesheet:
        return cls(
            sources=(parsed,),
            nodes=tuple(SourcedNode(parsed.reference, n) for n in parsed.nodes),
        )

    def append(self, other: Stylesheet) -> Stylesheet:
        known = set(self._by_reference)
        extra = tuple(s for s in other.sources if s.reference not in known)
        return Stylesheet(sources=self.sources + extra, nodes=self.nodes + other.nodes)

    def source(self, reference: str) -> ParsedStylesheet:
        return self._by_reference[reference]

    def with_nodes(self, nodes: Iterable[SourcedNode]) -> Stylesheet:
        return Stylesheet(sources=self.sources, nodes=tuple(nodes))

    def map_nodes(self, fn: Callable[[SourcedNode], Node]) -> Stylesheet:
        """Return a copy where every node is replaced by fn(sourced_node)."""
        return self.with_nodes(SourcedNode(sn.source, fn(sn)) for sn in self.nodes)

    def references(self) -> Sequence[str]:
        return [s.reference for s in self.sources]
