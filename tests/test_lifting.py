"""
Test StatementGraph -> SHACL lifting and PG schema -> statements.
"""

import warnings

from rdflib import Graph, URIRef, RDF
from rdflib.namespace import SH

from shapegraph.lifting import lift_to_rdf, pg_to_statements
from shapegraph.lowering import lower_to_pg
from shapegraph.model import (
    EdgeFact,
    PropertyConstraint,
    PropertyFact,
    StatementGraph,
    TypeFact,
)
from shapegraph.shacl_extractor import extract_statements

SCHEMA = "http://schema.org/"
XSD = "http://www.w3.org/2001/XMLSchema#"


def property_shape(g, shape, path):
    for prop in g.objects(shape, SH.property):
        if g.value(prop, SH.path) == URIRef(path):
            return prop
    return None


def test_node_shapes(person_statements):
    g = lift_to_rdf(person_statements)

    shapes = set(g.subjects(RDF.type, SH.NodeShape))
    assert shapes == {URIRef(SCHEMA + "PersonShape"), URIRef(SCHEMA + "OrganizationShape")}
    assert g.value(URIRef(SCHEMA + "PersonShape"), SH.targetClass) == URIRef(SCHEMA + "Person")


def test_property_and_relationship_shapes(person_statements):
    g = lift_to_rdf(person_statements)
    person = URIRef(SCHEMA + "PersonShape")

    given = property_shape(g, person, SCHEMA + "givenName")
    assert g.value(given, SH.datatype) == URIRef(XSD + "string")
    assert int(g.value(given, SH.minCount)) == 1
    # Unbounded: no sh:maxCount written
    assert g.value(given, SH.maxCount) is None

    member_of = property_shape(g, person, SCHEMA + "memberOf")
    assert g.value(member_of, SH["class"]) == URIRef(SCHEMA + "Organization")
    # minCount 0 is the default and is not written
    assert g.value(member_of, SH.minCount) is None

    role = property_shape(g, member_of, SCHEMA + "role")
    assert g.value(role, SH.datatype) == URIRef(XSD + "string")
    assert int(g.value(role, SH.minCount)) == 1


def test_mirrors_are_not_lifted(person_statements):
    g = lift_to_rdf(person_statements)
    person = URIRef(SCHEMA + "PersonShape")
    paths = {str(g.value(p, SH.path)) for p in g.objects(person, SH.property)}
    assert paths == {SCHEMA + "givenName", SCHEMA + "memberOf"}


SHAPES_IN_OWN_NAMESPACE = """\
@prefix : <http://example.org/shapes/> .
@prefix schema: <http://schema.org/> .
@prefix sh: <http://www.w3.org/ns/shacl#> .
@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .

:PersonShape a sh:NodeShape ;
    sh:targetClass schema:Person ;
    sh:property [
        sh:path schema:memberOf ;
        sh:class schema:Organization ;
        sh:property [ sh:path schema:role ; sh:datatype xsd:string ; sh:minCount 1 ]
    ] .

:OrganizationShape a sh:NodeShape ;
    sh:targetClass schema:Organization .
"""


def test_nested_paths_keep_their_namespace():
    """The empty prefix names the shapes, not the nested property."""
    g = Graph()
    g.parse(data=SHAPES_IN_OWN_NAMESPACE, format="turtle")
    statements = extract_statements(g)
    assert statements.namespace == "http://example.org/shapes/"

    lifted = lift_to_rdf(statements)
    [member_of] = lifted.subjects(SH.path, URIRef(SCHEMA + "memberOf"))
    nested = {str(lifted.value(p, SH.path)) for p in lifted.objects(member_of, SH.property)}
    assert nested == {SCHEMA + "role"}


def test_round_trip_reproduces_facts(flight_statements):
    """extract(lift(s)) gives back the same facts."""
    lifted = lift_to_rdf(flight_statements)
    again = extract_statements(lifted)
    assert set(again) == set(flight_statements)


def test_cardinality_round_trip(flight_statements):
    lifted = extract_statements(lift_to_rdf(flight_statements))
    rid = lifted.get(f"prop:FlightReservation:{SCHEMA}reservationId")
    assert (rid.min_count, rid.max_count) == (1, 1)
    edge = lifted.get(f"edge:Flight:{SCHEMA}departureAirport")
    assert (edge.min_count, edge.max_count) == (1, 1)


def test_shapes_created_lazily_in_any_order():
    """A property fact arriving before its type fact still gets a shape."""
    s = StatementGraph("rdf", "http://example.org/")
    s.add(PropertyFact("prop:Book:http://example.org/title", "Book", "http://example.org/title", XSD + "string", 1, 1))
    s.add(EdgeFact("edge:Book:http://example.org/author", "Book", "http://example.org/author", "Author"))

    g = lift_to_rdf(s)
    book = URIRef("http://example.org/BookShape")
    assert (book, RDF.type, SH.NodeShape) in g
    assert g.value(book, SH.targetClass) == URIRef("http://example.org/Book")
    assert len(list(g.objects(book, SH.property))) == 2

    author = property_shape(g, book, "http://example.org/author")
    assert g.value(author, SH["class"]) == URIRef("http://example.org/Author")


def test_edge_object_resolves_to_declared_class():
    s = StatementGraph("rdf", "http://example.org/")
    s.add(TypeFact("type:A", "A", "http://other.example/A"))
    s.add(TypeFact("type:B", "B", "http://other.example/B"))
    s.add(EdgeFact("edge:A:http://example.org/rel", "A", "http://example.org/rel", "B",
                   nested_properties=(PropertyConstraint("since", XSD + "date"),)))

    g = lift_to_rdf(s)
    shape = URIRef("http://other.example/AShape")
    rel = property_shape(g, shape, "http://example.org/rel")
    assert g.value(rel, SH["class"]) == URIRef("http://other.example/B")
    assert property_shape(g, rel, "http://example.org/since") is not None


def test_pg_schema_to_statements(person_statements):
    pg = lower_to_pg(person_statements)
    s = pg_to_statements(pg)

    assert s.subjects() == {"Person", "Organization"}
    given = s.get(f"prop:Person:{SCHEMA}givenName")
    assert given.datatype == XSD + "string"
    assert given.min_count == 1

    edge = s.get(f"edge:Person:{SCHEMA}memberOf")
    assert edge.object == "Organization"
    assert edge.min_count == 0
    assert edge.max_count == -1
    assert [(c.name, c.datatype, c.min_count, c.path) for c in edge.nested_properties] == [
        ("role", XSD + "string", 1, SCHEMA + "role"),
    ]

    # The node's memberOf_role comes back as a mirror, not a scalar property
    [mirror] = [f for f in s.property_facts() if f.relationship is not None]
    assert (mirror.subject, mirror.predicate, mirror.relationship) == ("Person", "memberOf_role", "memberOf")


def test_pg_schema_lifts_without_mirror_shapes(person_statements):
    g = lift_to_rdf(pg_to_statements(lower_to_pg(person_statements)))
    person = URIRef(SCHEMA + "PersonShape")
    paths = {str(g.value(p, SH.path)) for p in g.objects(person, SH.property)}
    assert paths == {SCHEMA + "givenName", SCHEMA + "memberOf"}


def test_pg_schema_lowers_the_same_again(flight_statements):
    """lower(pg_to_statements(pg)) keeps labels, types and cardinalities."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        pg = lower_to_pg(flight_statements)
    again = lower_to_pg(pg_to_statements(pg))

    assert again.labels() == pg.labels()
    assert again.relationship_types() == pg.relationship_types()
    for node in pg.nodes:
        assert again.get_node(node.id).property_constraints == node.property_constraints
    assert {(e.type, e.min_count, e.max_count) for e in again.edges} == {
        (e.type, e.min_count, e.max_count) for e in pg.edges
    }


def test_lift_pg_schema(person_statements):
    g = lift_to_rdf(pg_to_statements(lower_to_pg(person_statements)))
    assert g.value(URIRef(SCHEMA + "PersonShape"), SH.targetClass) == URIRef(SCHEMA + "Person")
