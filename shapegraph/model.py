"""
shapegraph.model — The IR shared by every stage.

Two graph shapes live here:

- SchemaGraph: a PG schema (labelled nodes, typed edges, property
  constraints). Produced by lowering, consumed by the backends.
- StatementGraph: reified schema facts (TypeFact / PropertyFact /
  EdgeFact). Produced by the SHACL extractor, consumed by lowering and
  lifting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Type, TypeVar, Union

UNBOUNDED = -1  # max_count sentinel for "no upper bound"

DEFAULT_NAMESPACE = "http://schema.org/"


class SchemaWarning(UserWarning):
    """Diagnostic for a shape or fact that was skipped."""


# ─── Constraints ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class PropertyConstraint:
    name: str
    datatype: str
    min_count: int = 0
    max_count: int = UNBOUNDED
    # Full predicate IRI when known; name is only its local part
    path: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        if self.min_count < 0:
            raise ValueError(f"min_count must be >= 0, got {self.min_count} for {self.name!r}")
        if self.max_count < UNBOUNDED:
            raise ValueError(f"max_count must be -1 or >= 0, got {self.max_count} for {self.name!r}")

    @property
    def required(self) -> bool:
        return self.min_count > 0

    @property
    def unbounded(self) -> bool:
        return self.max_count == UNBOUNDED

    def allows(self, count: int) -> bool:
        """True if `count` values fall within [min_count, max_count]."""
        if count < self.min_count:
            return False
        return self.unbounded or count <= self.max_count

    def to_dict(self) -> dict:
        d: dict = {"type": self.datatype}
        if self.min_count > 0:
            d["minCount"] = self.min_count
        if not self.unbounded:
            d["maxCount"] = self.max_count
        return d


# ─── PG schema graph ─────────────────────────────────────────────────


@dataclass
class SchemaNode:
    id: str
    labels: set[str] = field(default_factory=set)
    property_constraints: dict[str, PropertyConstraint] = field(default_factory=dict)
    # Would-be instance values; the validator checks these against the constraints
    properties: dict = field(default_factory=dict)

    @property
    def label(self) -> str:
        """Primary label: the first in sorted order, else the id."""
        return min(self.labels) if self.labels else self.id


@dataclass
class SchemaEdge:
    id: str
    source: str
    target: str
    type: str
    property_constraints: dict[str, PropertyConstraint] = field(default_factory=dict)
    # The relationship's own cardinality (minCount / maxCount)
    properties: dict = field(default_factory=dict)

    @property
    def min_count(self) -> int:
        return int(self.properties.get("minCount", 0))

    @property
    def max_count(self) -> int:
        return int(self.properties.get("maxCount", UNBOUNDED))


class SchemaGraph:
    """A named, namespaced container of SchemaNodes and SchemaEdges.

    Node ids are unique; edges may only connect nodes of this graph.
    """

    def __init__(self, name: str, namespace: str = DEFAULT_NAMESPACE):
        self.name = name
        self.namespace = namespace
        self._nodes: dict[str, SchemaNode] = {}
        self.edges: list[SchemaEdge] = []

    def __repr__(self):
        return f"SchemaGraph({self.name!r}, nodes={len(self._nodes)}, edges={len(self.edges)})"

    @property
    def nodes(self) -> list[SchemaNode]:
        return list(self._nodes.values())

    def add_node(self, node: SchemaNode) -> SchemaNode:
        self._nodes[node.id] = node
        return node

    def get_node(self, node_id: str) -> Optional[SchemaNode]:
        return self._nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def get_or_create_node(self, node_id: str) -> SchemaNode:
        node = self._nodes.get(node_id)
        if node is None:
            node = self.add_node(SchemaNode(node_id))
        return node

    def add_edge(self, edge: SchemaEdge) -> SchemaEdge:
        for end in (edge.source, edge.target):
            if end not in self._nodes:
                raise ValueError(
                    f"Edge {edge.id!r} refers to node {end!r} which is not in graph {self.name!r}"
                )
        self.edges.append(edge)
        return edge

    def edges_from(self, node_id: str) -> list[SchemaEdge]:
        return [e for e in self.edges if e.source == node_id]

    def find_by_label(self, label: str) -> Optional[SchemaNode]:
        for node in self._nodes.values():
            if label in node.labels:
                return node
        return None

    def labels(self) -> set[str]:
        return {label for node in self._nodes.values() for label in node.labels}

    def relationship_types(self) -> set[str]:
        return {e.type for e in self.edges}

    def is_empty(self) -> bool:
        return not self._nodes and not self.edges


# ─── Statement facts ─────────────────────────────────────────────────


@dataclass(frozen=True)
class TypeFact:
    """subject is of type object."""

    id: str
    subject: str
    object: str


@dataclass(frozen=True)
class PropertyFact:
    """subject has scalar property predicate with these constraints.

    `relationship` is set when the fact mirrors a property nested under
    that relationship, under the compound name relationship_property.
    """

    id: str
    subject: str
    predicate: str
    datatype: str
    min_count: int = 0
    max_count: int = UNBOUNDED
    relationship: Optional[str] = None


@dataclass(frozen=True)
class EdgeFact:
    """subject has relationship predicate to object."""

    id: str
    subject: str
    predicate: str
    object: str
    min_count: int = 0
    max_count: int = UNBOUNDED
    nested_properties: tuple[PropertyConstraint, ...] = ()


Fact = Union[TypeFact, PropertyFact, EdgeFact]

F = TypeVar("F", TypeFact, PropertyFact, EdgeFact)


def type_fact_id(subject: str) -> str:
    return f"type:{subject}"


def property_fact_id(subject: str, predicate: str) -> str:
    return f"prop:{subject}:{predicate}"


def edge_fact_id(subject: str, predicate: str) -> str:
    return f"edge:{subject}:{predicate}"


def mirror_fact_id(subject: str, relationship: str, predicate: str) -> str:
    return f"mirror:{subject}:{relationship}:{predicate}"


class StatementGraph:
    """Facts indexed by id, in insertion order.

    Built once by one stage and only read by the next.
    """

    def __init__(self, name: str, namespace: str = DEFAULT_NAMESPACE):
        self.name = name
        self.namespace = namespace
        self._facts: dict[str, Fact] = {}

    def __repr__(self):
        counts = ", ".join(
            f"{kind.__name__}={len(self.facts_of(kind))}"
            for kind in (TypeFact, PropertyFact, EdgeFact)
        )
        return f"StatementGraph({self.name!r}, {counts})"

    def __len__(self) -> int:
        return len(self._facts)

    def __iter__(self) -> Iterator[Fact]:
        return iter(self._facts.values())

    def __contains__(self, fact_id: str) -> bool:
        return fact_id in self._facts

    def add(self, fact: Fact) -> Fact:
        # Same id replaces the earlier fact (last write wins)
        self._facts.pop(fact.id, None)
        self._facts[fact.id] = fact
        return fact

    def get(self, fact_id: str) -> Optional[Fact]:
        return self._facts.get(fact_id)

    def facts_of(self, kind: Type[F]) -> list[F]:
        return [f for f in self._facts.values() if isinstance(f, kind)]

    def type_facts(self) -> list[TypeFact]:
        return self.facts_of(TypeFact)

    def property_facts(self) -> list[PropertyFact]:
        return self.facts_of(PropertyFact)

    def edge_facts(self) -> list[EdgeFact]:
        return self.facts_of(EdgeFact)

    def subjects(self) -> set[str]:
        """Identifiers declared by TypeFacts."""
        return {f.subject for f in self.type_facts()}

    def is_empty(self) -> bool:
        return not self._facts
