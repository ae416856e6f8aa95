"""
shapegraph.lifting — StatementGraph -> SHACL shapes (rdflib Graph).

The inverse of shacl_extractor. Node shapes are created lazily, so facts
may arrive in any order; a property or edge fact seen before its type
fact gets a node shape at namespace + subject + "Shape".

Also rebuilds a StatementGraph from a PG SchemaGraph, so a lowered
schema can be lifted back to SHACL.
"""

from __future__ import annotations

from typing import Optional

from rdflib import BNode, Graph, Literal, Namespace, URIRef, RDF, XSD
from rdflib.namespace import SH

from shapegraph.mapping import to_camel, xsd_for
from shapegraph.model import (
    EdgeFact,
    PropertyConstraint,
    PropertyFact,
    SchemaEdge,
    SchemaGraph,
    StatementGraph,
    TypeFact,
    edge_fact_id,
    mirror_fact_id,
    property_fact_id,
    type_fact_id,
)


def lift_to_rdf(statements: StatementGraph) -> Graph:
    """Reconstruct node and property shapes from `statements`."""
    lifter = _Lifter(statements)
    for fact in statements:
        if isinstance(fact, TypeFact):
            lifter.node_shape(fact.subject, fact.object)
        elif isinstance(fact, PropertyFact):
            if fact.relationship is None:
                lifter.property_shape(fact)
        elif isinstance(fact, EdgeFact):
            lifter.edge_shape(fact)
    return lifter.g


class _Lifter:
    def __init__(self, statements: StatementGraph):
        self.namespace = statements.namespace
        # subject -> target class IRI, so edge objects resolve to the declared class
        self.classes = {f.subject: f.object for f in statements.type_facts()}
        self.shapes: dict[str, URIRef] = {}

        self.g = Graph()
        self.g.bind("sh", SH)
        self.g.bind("xsd", XSD)
        # rdflib pre-binds schema: to https://schema.org/, which would push
        # http://schema.org/ onto an auto-generated schema1: prefix
        prefix = "schema" if "schema.org" in self.namespace else ""
        self.g.bind(prefix, Namespace(self.namespace), override=True, replace=True)

    def expand(self, name: str) -> URIRef:
        if "://" in name or name.startswith("urn:"):
            return URIRef(name)
        return URIRef(self.namespace + name)

    def node_shape(self, subject: str, target_class: Optional[str] = None) -> URIRef:
        shape = self.shapes.get(subject)
        if shape is not None:
            return shape
        target = self.expand(target_class or self.classes.get(subject, subject))
        shape = URIRef(str(target) + "Shape")
        self.g.add((shape, RDF.type, SH.NodeShape))
        self.g.add((shape, SH.targetClass, target))
        self.shapes[subject] = shape
        return shape

    def property_shape(self, fact: PropertyFact) -> None:
        shape = self.node_shape(fact.subject)
        prop = BNode()
        self.g.add((shape, SH.property, prop))
        self.g.add((prop, SH.path, self.expand(fact.predicate)))
        self.g.add((prop, SH.datatype, URIRef(fact.datatype)))
        self._cardinality(prop, fact.min_count, fact.max_count)

    def edge_shape(self, fact: EdgeFact) -> None:
        shape = self.node_shape(fact.subject)
        prop = BNode()
        self.g.add((shape, SH.property, prop))
        self.g.add((prop, SH.path, self.expand(fact.predicate)))
        self.g.add((prop, SH["class"], self.expand(self.classes.get(fact.object, fact.object))))
        self._cardinality(prop, fact.min_count, fact.max_count)

        for nested in fact.nested_properties:
            nested_prop = BNode()
            self.g.add((prop, SH.property, nested_prop))
            self.g.add((nested_prop, SH.path, self.expand(nested.path or nested.name)))
            self.g.add((nested_prop, SH.datatype, URIRef(nested.datatype)))
            self._cardinality(nested_prop, nested.min_count, nested.max_count)

    def _cardinality(self, prop: BNode, min_count: int, max_count: int) -> None:
        if min_count > 0:
            self.g.add((prop, SH.minCount, Literal(min_count)))
        if max_count >= 0:
            self.g.add((prop, SH.maxCount, Literal(max_count)))


# ─── PG schema -> statements ─────────────────────────────────────────


def pg_to_statements(schema: SchemaGraph, namespace: Optional[str] = None) -> StatementGraph:
    """Rebuild facts from a PG schema.

    Labels become classes in `namespace` (default: the schema's), PG types
    map back through xsd_for, and relationship types go back to camelCase
    predicates (UNDER_NAME -> underName).
    """

    ns = namespace or schema.namespace
    statements = StatementGraph("rdf", ns)

    for node in schema.nodes:
        statements.add(TypeFact(
            id=type_fact_id(node.id),
            subject=node.id,
            object=ns + node.label,
        ))

    for node in schema.nodes:
        outgoing = [e for e in schema.edges if e.source == node.id]
        for constraint in node.property_constraints.values():
            mirrored = _mirrored_relationship(constraint.name, outgoing)
            if mirrored is not None:
                relationship, nested = mirrored
                statements.add(PropertyFact(
                    id=mirror_fact_id(node.id, relationship, nested.path or ns + nested.name),
                    subject=node.id,
                    predicate=constraint.name,
                    datatype=xsd_for(constraint.datatype),
                    min_count=constraint.min_count,
                    max_count=constraint.max_count,
                    relationship=relationship,
                ))
                continue
            predicate = constraint.path or ns + constraint.name
            statements.add(PropertyFact(
                id=property_fact_id(node.id, predicate),
                subject=node.id,
                predicate=predicate,
                datatype=xsd_for(constraint.datatype),
                min_count=constraint.min_count,
                max_count=constraint.max_count,
            ))

    for edge in schema.edges:
        predicate = ns + to_camel(edge.type)
        nested = tuple(
            PropertyConstraint(
                name=c.name,
                datatype=xsd_for(c.datatype),
                min_count=c.min_count,
                max_count=c.max_count,
                path=c.path,
            )
            for c in edge.property_constraints.values()
        )
        statements.add(EdgeFact(
            id=edge_fact_id(edge.source, predicate),
            subject=edge.source,
            predicate=predicate,
            object=edge.target,
            min_count=edge.min_count,
            max_count=edge.max_count,
            nested_properties=nested,
        ))

    return statements


def _mirrored_relationship(name: str, outgoing: list[SchemaEdge]) -> Optional[tuple[str, PropertyConstraint]]:
    """(relationship, edge constraint) when `name` is relationship_property
    for one of the node's outgoing edges."""
    for edge in outgoing:
        relationship = to_camel(edge.type)
        prefix = f"{relationship}_"
        if name.startswith(prefix):
            nested = edge.property_constraints.get(name[len(prefix):])
            if nested is not None:
                return relationship, nested
    return None
