"""
shapegraph.shacl_extractor — Walk SHACL shapes into a StatementGraph.

Takes an already-parsed rdflib Graph and reads only the SHACL terms the
statement vocabulary can carry: sh:NodeShape, sh:targetClass,
sh:property, sh:path, sh:datatype, sh:class, sh:minCount, sh:maxCount.
Anything else is dropped.
"""

from __future__ import annotations

import warnings
from typing import Optional

from rdflib import Graph, URIRef, RDF
from rdflib.namespace import SH

from shapegraph.mapping import Mapping, local_name
from shapegraph.model import (
    DEFAULT_NAMESPACE,
    UNBOUNDED,
    EdgeFact,
    PropertyConstraint,
    PropertyFact,
    SchemaWarning,
    StatementGraph,
    TypeFact,
    edge_fact_id,
    mirror_fact_id,
    property_fact_id,
    type_fact_id,
)


def extract_statements(
    g: Graph,
    mapping: Optional[Mapping] = None,
    name: str = "rdf",
    namespace: Optional[str] = None,
) -> StatementGraph:
    """Turn the node shapes of `g` into Type/Property/Edge facts.

    Two passes: every shape's subject identifier is registered before any
    property shape is read, because a relationship may point at a shape
    that appears later in the document.
    """

    if mapping is None:
        mapping = Mapping()

    statements = StatementGraph(name, namespace or _default_namespace(g))

    # (shape node, subject identifier) for every registered target class
    targets: list[tuple] = []

    # Pass 1: one TypeFact per sh:targetClass
    for shape_node in _node_shapes(g):
        target_classes = [tc for tc in g.objects(shape_node, SH.targetClass) if isinstance(tc, URIRef)]
        if not target_classes:
            warnings.warn(
                f"Node shape {shape_node} has no sh:targetClass, skipping.",
                SchemaWarning,
                stacklevel=2,
            )
            continue

        for target_class in target_classes:
            subject = mapping.label_for(str(target_class))
            statements.add(TypeFact(
                id=type_fact_id(subject),
                subject=subject,
                object=str(target_class),
            ))
            targets.append((shape_node, subject))

    # Pass 2: property shapes of every registered shape
    for shape_node, subject in targets:
        prop_nodes = sorted(g.objects(shape_node, SH.property), key=lambda p: str(g.value(p, SH.path)))
        for prop_node in prop_nodes:
            _process_property_shape(g, prop_node, str(shape_node), subject, mapping, statements)

    return statements


def _node_shapes(g: Graph) -> list:
    # Sorted so repeated runs emit facts in the same order
    return sorted(set(g.subjects(RDF.type, SH.NodeShape)), key=str)


def _default_namespace(g: Graph) -> str:
    """The empty-prefix binding, else the namespace of the first target
    class, else schema.org."""
    for prefix, uri in g.namespaces():
        if prefix == "":
            return str(uri)
    for shape_node in _node_shapes(g):
        for target_class in sorted(g.objects(shape_node, SH.targetClass), key=str):
            iri = str(target_class)
            name = local_name(iri)
            if isinstance(target_class, URIRef) and name != iri:
                return iri[: -len(name)] if name else iri
    return DEFAULT_NAMESPACE


# ── Property shape processing ────────────────────────────────────


def _process_property_shape(
    g: Graph,
    prop_node,
    shape_iri: str,
    subject: str,
    mapping: Mapping,
    statements: StatementGraph,
) -> None:
    """Emit the fact(s) for one sh:property entry of a node shape."""

    path = _property_path(g, prop_node, shape_iri)
    if path is None:
        return

    cardinality = _cardinality(g, prop_node, shape_iri, path)
    if cardinality is None:
        return
    min_count, max_count = cardinality

    sh_class = g.value(prop_node, SH["class"])
    sh_datatype = g.value(prop_node, SH.datatype)

    if isinstance(sh_class, URIRef):
        _relationship_facts(
            g, prop_node, shape_iri, subject, path, sh_class,
            min_count, max_count, mapping, statements,
        )
    elif sh_datatype is not None:
        statements.add(PropertyFact(
            id=property_fact_id(subject, path),
            subject=subject,
            predicate=path,
            datatype=str(sh_datatype),
            min_count=min_count,
            max_count=max_count,
        ))
    # Neither sh:class nor sh:datatype: nothing the statement vocabulary can carry


def _relationship_facts(
    g: Graph,
    prop_node,
    shape_iri: str,
    subject: str,
    path: str,
    sh_class: URIRef,
    min_count: int,
    max_count: int,
    mapping: Mapping,
    statements: StatementGraph,
) -> None:
    """EdgeFact for a sh:class property, plus the flattened mirrors of its
    nested properties on the source subject."""

    nested = _nested_constraints(g, prop_node, shape_iri)

    statements.add(EdgeFact(
        id=edge_fact_id(subject, path),
        subject=subject,
        predicate=path,
        object=mapping.label_for(str(sh_class)),
        min_count=min_count,
        max_count=max_count,
        nested_properties=tuple(constraint for constraint, _ in nested),
    ))

    # Some schemas flatten relationship properties into top-level
    # property shapes named relationship_property; mirror onto that form too.
    relationship = local_name(path)
    for constraint, nested_path in nested:
        statements.add(PropertyFact(
            id=mirror_fact_id(subject, relationship, nested_path),
            subject=subject,
            predicate=f"{relationship}_{constraint.name}",
            datatype=constraint.datatype,
            min_count=constraint.min_count,
            max_count=constraint.max_count,
            relationship=relationship,
        ))


def _nested_constraints(g: Graph, prop_node, shape_iri: str) -> list[tuple[PropertyConstraint, str]]:
    """Edge-scoped constraints from the sh:property entries nested in a
    relationship's property shape. Datatypes stay as XSD IRIs here."""

    constraints = []
    for nested_node in g.objects(prop_node, SH.property):
        path = _property_path(g, nested_node, shape_iri)
        if path is None:
            continue
        sh_datatype = g.value(nested_node, SH.datatype)
        if sh_datatype is None:
            # Nested relationships are not carried by the statement vocabulary
            continue
        cardinality = _cardinality(g, nested_node, shape_iri, path)
        if cardinality is None:
            continue
        min_count, max_count = cardinality
        constraints.append((
            PropertyConstraint(
                name=local_name(path),
                datatype=str(sh_datatype),
                min_count=min_count,
                max_count=max_count,
                path=path,
            ),
            path,
        ))
    constraints.sort(key=lambda pair: pair[1])
    return constraints


# ── Helpers ──────────────────────────────────────────────────────


def _property_path(g: Graph, prop_node, shape_iri: str) -> Optional[str]:
    path = g.value(prop_node, SH.path)
    if path is None:
        warnings.warn(
            f"Property shape in {shape_iri} has no sh:path, skipping.",
            SchemaWarning,
            stacklevel=3,
        )
        return None
    if not isinstance(path, URIRef):
        warnings.warn(
            f"Complex sh:path in shape {shape_iri} is not supported, skipping.",
            SchemaWarning,
            stacklevel=3,
        )
        return None
    return str(path)


def _cardinality(g: Graph, prop_node, shape_iri: str, path: str) -> Optional[tuple[int, int]]:
    """(minCount, maxCount) with SHACL defaults 0 and unbounded."""
    min_lit = g.value(prop_node, SH.minCount)
    max_lit = g.value(prop_node, SH.maxCount)
    try:
        min_count = int(min_lit) if min_lit is not None else 0
        max_count = int(max_lit) if max_lit is not None else UNBOUNDED
    except (TypeError, ValueError):
        warnings.warn(
            f"Unreadable sh:minCount/sh:maxCount on {path} in {shape_iri}, skipping.",
            SchemaWarning,
            stacklevel=3,
        )
        return None
    if min_count < 0 or max_count < UNBOUNDED:
        warnings.warn(
            f"Negative cardinality on {path} in {shape_iri}, skipping.",
            SchemaWarning,
            stacklevel=3,
        )
        return None
    return min_count, max_count
