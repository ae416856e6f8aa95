"""
shapegraph.backends.turtle — Lifted SHACL shapes as Turtle.
"""

from __future__ import annotations

from rdflib import Graph, RDF, XSD
from rdflib.namespace import SH


class TurtleBackend:
    name = "turtle"
    extension = "_transformed.ttl"
    consumes = "rdf"

    def serialize(self, g: Graph) -> str:
        # Bind on a copy; the caller's graph keeps its prefixes
        out = Graph()
        for prefix, namespace in g.namespaces():
            out.bind(prefix, namespace, override=True, replace=True)
        out.bind("sh", SH, override=True, replace=True)
        out.bind("rdf", RDF, override=True, replace=True)
        out.bind("xsd", XSD, override=True, replace=True)
        out += g

        result = out.serialize(format="turtle")
        # rdflib may still emit schema1: for http://schema.org/ when schema: is taken
        result = result.replace("@prefix schema1: <http://schema.org/> .",
                                "@prefix schema: <http://schema.org/> .")
        return result.replace("schema1:", "schema:")
