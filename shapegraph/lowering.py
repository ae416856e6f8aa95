"""
shapegraph.lowering — StatementGraph -> PG SchemaGraph.

Three ordered passes over the same statement graph:

    A. TypeFacts     -> labelled nodes
    B. PropertyFacts -> node property constraints
    C. EdgeFacts     -> typed edges, with their nested constraints and
                        whatever the enabled compatibility shims recover

The canonical encoding of a relationship-scoped property is a nested
sh:property under the relationship's property shape. Two alternative
encodings seen in the wild are recovered by opt-out shims:

    Shim.SAME_SUBJECT   property facts whose subject is the relationship
    Shim.COMPOUND_NAME  property facts named relationship_property on the
                        relationship's source subject
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from shapegraph.mapping import Mapping, local_name, map_datatype
from shapegraph.model import (
    EdgeFact,
    PropertyConstraint,
    PropertyFact,
    SchemaEdge,
    SchemaGraph,
    SchemaWarning,
    StatementGraph,
)


# ─── Options ─────────────────────────────────────────────────────────


class ConflictPolicy(str, Enum):
    """What to do when a constraint name is attached twice to one node or edge."""

    LAST_WRITE = "last_write"
    FIRST_WRITE = "first_write"
    STRICT = "strict"


class Shim(str, Enum):
    SAME_SUBJECT = "same_subject"
    COMPOUND_NAME = "compound_name"


class ConstraintConflictError(ValueError):
    """Two different constraints with the same name under ConflictPolicy.STRICT."""

    def __init__(self, owner: str, existing: PropertyConstraint, incoming: PropertyConstraint):
        self.owner = owner
        self.existing = existing
        self.incoming = incoming
        super().__init__(
            f"Conflicting constraints for {existing.name!r} on {owner!r}: "
            f"{existing.to_dict()} vs {incoming.to_dict()}"
        )


@dataclass
class LoweringOptions:
    conflict: ConflictPolicy = ConflictPolicy.LAST_WRITE
    shims: frozenset[Shim] = field(default_factory=lambda: frozenset(Shim))
    # Put relationship_property mirrors on the source node as well as the edge
    mirrors_on_source: bool = True


# ─── Entry point ─────────────────────────────────────────────────────


def lower_to_pg(
    statements: StatementGraph,
    mapping: Optional[Mapping] = None,
    options: Optional[LoweringOptions] = None,
) -> SchemaGraph:
    """Materialize a PG schema from the facts of `statements`.

    `statements` is only read. Facts whose subject (or edge object) has
    no node after Pass A are skipped with a SchemaWarning.
    """

    if mapping is None:
        mapping = Mapping()
    if options is None:
        options = LoweringOptions()

    schema = SchemaGraph("pg", statements.namespace)

    # Pass A: nodes
    for fact in statements.type_facts():
        node = schema.get_or_create_node(fact.subject)
        node.labels.add(mapping.label_for(fact.object))

    # Subjects the same-subject shim reads as relationships in Pass C
    relationship_subjects = set()
    if Shim.SAME_SUBJECT in options.shims:
        relationship_subjects = {local_name(f.predicate) for f in statements.edge_facts()}

    # Pass B: scalar properties, including relationship_property mirrors
    for fact in statements.property_facts():
        if fact.relationship is not None and not options.mirrors_on_source:
            continue
        node = schema.get_node(fact.subject)
        if node is None:
            if fact.subject not in relationship_subjects:
                warnings.warn(
                    f"Property fact {fact.id!r} refers to unknown subject {fact.subject!r}, skipping.",
                    SchemaWarning,
                    stacklevel=2,
                )
            continue
        path = fact.predicate if fact.relationship is None else None
        constraint = _constraint_from_fact(fact, mapping.property_for(fact.predicate), path)
        _attach(node.property_constraints, constraint, node.id, options.conflict)

    # Pass C: relationships
    for fact in statements.edge_facts():
        if not schema.has_node(fact.subject) or not schema.has_node(fact.object):
            missing = fact.subject if not schema.has_node(fact.subject) else fact.object
            warnings.warn(
                f"Edge fact {fact.id!r} refers to unknown node {missing!r}, skipping.",
                SchemaWarning,
                stacklevel=2,
            )
            continue
        edge = _build_edge(fact, statements, mapping, options)
        schema.add_edge(edge)

    return schema


# ── Pass C ───────────────────────────────────────────────────────


def _build_edge(
    fact: EdgeFact,
    statements: StatementGraph,
    mapping: Mapping,
    options: LoweringOptions,
) -> SchemaEdge:
    rel_type = mapping.relationship_for(fact.predicate)
    edge = SchemaEdge(
        id=f"{fact.subject}_{rel_type}_{fact.object}",
        source=fact.subject,
        target=fact.object,
        type=rel_type,
    )

    for nested in fact.nested_properties:
        constraint = PropertyConstraint(
            name=nested.name,
            datatype=map_datatype(nested.datatype),
            min_count=nested.min_count,
            max_count=nested.max_count,
            path=nested.path,
        )
        _attach(edge.property_constraints, constraint, edge.id, options.conflict)

    if Shim.SAME_SUBJECT in options.shims:
        for constraint in same_subject_constraints(fact, statements, mapping):
            _attach(edge.property_constraints, constraint, edge.id, options.conflict)

    if Shim.COMPOUND_NAME in options.shims:
        for constraint in compound_name_constraints(fact, statements):
            _attach(edge.property_constraints, constraint, edge.id, options.conflict)

    edge.properties["minCount"] = fact.min_count
    if fact.max_count >= 0:
        edge.properties["maxCount"] = fact.max_count
    return edge


# ── Compatibility shims ──────────────────────────────────────────


def same_subject_constraints(
    fact: EdgeFact,
    statements: StatementGraph,
    mapping: Optional[Mapping] = None,
) -> list[PropertyConstraint]:
    """Edge constraints from property facts whose subject is the relationship.

        ex:underName -> [ ex:bookingTime xsd:dateTime ]
    """
    if mapping is None:
        mapping = Mapping()
    relationship = local_name(fact.predicate)
    return [
        _constraint_from_fact(pf, mapping.property_for(pf.predicate))
        for pf in statements.property_facts()
        if pf.subject == relationship and pf.relationship is None
    ]


def compound_name_constraints(fact: EdgeFact, statements: StatementGraph) -> list[PropertyConstraint]:
    """Edge constraints from property facts on the source subject named
    `{relationship}_{property}`; the constraint is named by the remainder.

        Person.memberOf_role -> MEMBER_OF.role
    """
    prefix = f"{local_name(fact.predicate)}_"
    constraints = []
    for pf in statements.property_facts():
        if pf.subject != fact.subject:
            continue
        name = local_name(pf.predicate)
        if name.startswith(prefix) and len(name) > len(prefix):
            constraints.append(_constraint_from_fact(pf, name[len(prefix):]))
    return constraints


# ── Helpers ──────────────────────────────────────────────────────


def _constraint_from_fact(fact: PropertyFact, name: str, path: Optional[str] = None) -> PropertyConstraint:
    return PropertyConstraint(
        name=name,
        datatype=map_datatype(fact.datatype),
        min_count=fact.min_count,
        max_count=fact.max_count,
        path=path,
    )


def _attach(
    constraints: dict[str, PropertyConstraint],
    constraint: PropertyConstraint,
    owner: str,
    policy: ConflictPolicy,
) -> None:
    existing = constraints.get(constraint.name)
    if existing is None or policy == ConflictPolicy.LAST_WRITE:
        constraints[constraint.name] = constraint
    elif policy == ConflictPolicy.STRICT and existing != constraint:
        raise ConstraintConflictError(owner, existing, constraint)
    # FIRST_WRITE, or STRICT with an identical re-attachment: keep existing
