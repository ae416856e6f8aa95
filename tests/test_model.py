"""
Test the IR: PG schema graph invariants and the statement graph.
"""

import pytest

from shapegraph.model import (
    UNBOUNDED,
    EdgeFact,
    PropertyConstraint,
    PropertyFact,
    SchemaEdge,
    SchemaGraph,
    SchemaNode,
    StatementGraph,
    TypeFact,
    edge_fact_id,
    mirror_fact_id,
    property_fact_id,
    type_fact_id,
)

SCHEMA = "http://schema.org/"
XSD = "http://www.w3.org/2001/XMLSchema#"


def test_property_constraint_defaults():
    c = PropertyConstraint("name", "String")
    assert c.min_count == 0
    assert c.max_count == UNBOUNDED
    assert not c.required
    assert c.unbounded
    assert c.to_dict() == {"type": "String"}


def test_property_constraint_to_dict_keeps_explicit_bounds():
    c = PropertyConstraint("email", "String", min_count=1, max_count=1)
    assert c.required
    assert c.to_dict() == {"type": "String", "minCount": 1, "maxCount": 1}


def test_property_constraint_rejects_bad_bounds():
    with pytest.raises(ValueError):
        PropertyConstraint("x", "String", min_count=-1)
    with pytest.raises(ValueError):
        PropertyConstraint("x", "String", max_count=-2)


def test_property_constraint_allows():
    c = PropertyConstraint("tag", "String", min_count=1, max_count=2)
    assert not c.allows(0)
    assert c.allows(1)
    assert c.allows(2)
    assert not c.allows(3)
    assert PropertyConstraint("tag", "String", min_count=1).allows(1000)


def test_schema_graph_node_index_stays_consistent():
    g = SchemaGraph("pg")
    first = g.add_node(SchemaNode("Person", {"Person"}))
    assert g.get_or_create_node("Person") is first

    # Same id replaces, never duplicates
    g.add_node(SchemaNode("Person", {"Human"}))
    assert len(g.nodes) == 1
    assert g.get_node("Person").labels == {"Human"}
    assert g.find_by_label("Human") is g.get_node("Person")
    assert g.find_by_label("Person") is None


def test_schema_graph_rejects_dangling_edges():
    g = SchemaGraph("pg")
    g.add_node(SchemaNode("Person", {"Person"}))

    with pytest.raises(ValueError, match="Organization"):
        g.add_edge(SchemaEdge("e1", "Person", "Organization", "MEMBER_OF"))
    assert g.edges == []

    g.add_node(SchemaNode("Organization", {"Organization"}))
    g.add_edge(SchemaEdge("e1", "Person", "Organization", "MEMBER_OF"))
    assert g.relationship_types() == {"MEMBER_OF"}
    assert [e.id for e in g.edges_from("Person")] == ["e1"]
    assert g.labels() == {"Person", "Organization"}


def test_schema_edge_cardinality_properties():
    e = SchemaEdge("e", "a", "b", "T", properties={"minCount": "1", "maxCount": 3})
    assert e.min_count == 1
    assert e.max_count == 3
    assert SchemaEdge("e", "a", "b", "T").max_count == UNBOUNDED


def test_node_primary_label():
    assert SchemaNode("x", {"B", "A"}).label == "A"
    assert SchemaNode("x").label == "x"


def test_fact_ids():
    assert type_fact_id("Person") == "type:Person"
    assert property_fact_id("Person", SCHEMA + "givenName") == f"prop:Person:{SCHEMA}givenName"
    assert edge_fact_id("Person", SCHEMA + "memberOf") == f"edge:Person:{SCHEMA}memberOf"
    assert mirror_fact_id("Person", "memberOf", SCHEMA + "role") == f"mirror:Person:memberOf:{SCHEMA}role"


def test_statement_graph_last_write_wins():
    """Adding a fact with an existing id replaces it and moves it to the end."""
    s = StatementGraph("rdf")
    s.add(TypeFact(type_fact_id("Person"), "Person", SCHEMA + "Person"))
    s.add(PropertyFact(property_fact_id("Person", SCHEMA + "name"), "Person", SCHEMA + "name", XSD + "string"))
    s.add(PropertyFact(property_fact_id("Person", SCHEMA + "name"), "Person", SCHEMA + "name", XSD + "integer"))

    assert len(s) == 2
    assert s.get(property_fact_id("Person", SCHEMA + "name")).datatype == XSD + "integer"
    assert [type(f) for f in s] == [TypeFact, PropertyFact]


def test_statement_graph_views():
    s = StatementGraph("rdf")
    s.add(TypeFact("type:A", "A", SCHEMA + "A"))
    s.add(TypeFact("type:B", "B", SCHEMA + "B"))
    s.add(EdgeFact("edge:A:rel", "A", SCHEMA + "rel", "B"))
    s.add(PropertyFact("prop:A:p", "A", SCHEMA + "p", XSD + "string"))

    assert s.subjects() == {"A", "B"}
    assert len(s.type_facts()) == 2
    assert len(s.edge_facts()) == 1
    assert len(s.property_facts()) == 1
    assert "edge:A:rel" in s
    assert not s.is_empty()
    assert StatementGraph("empty").is_empty()


def test_facts_are_hashable():
    """Frozen facts, including nested constraints, can live in sets."""
    nested = (PropertyConstraint("role", XSD + "string", 1),)
    a = EdgeFact("edge:A:rel", "A", SCHEMA + "rel", "B", nested_properties=nested)
    b = EdgeFact("edge:A:rel", "A", SCHEMA + "rel", "B", nested_properties=nested)
    assert {a, b} == {a}
