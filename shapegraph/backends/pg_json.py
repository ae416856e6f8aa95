"""
shapegraph.backends.pg_json — PG schema as JSON.

    {"nodes": [{"label": ..., "properties": {name: {"type", "minCount"?, "maxCount"?}}}],
     "relationships": [{"type", "source", "target", "properties",
                        "minCount"?, "maxCount"?}]}

Relationship minCount/maxCount are written as strings.
"""

from __future__ import annotations

import json

from shapegraph.model import SchemaGraph


class PgJsonBackend:
    name = "json"
    extension = "_pg_schema.json"
    consumes = "pg_schema"

    def __init__(self, indent: int = 2):
        self.indent = indent

    def serialize(self, schema: SchemaGraph) -> str:
        return json.dumps(schema_to_dict(schema), indent=self.indent)


def schema_to_dict(schema: SchemaGraph) -> dict:
    nodes = []
    for node in sorted(schema.nodes, key=lambda n: n.label):
        nodes.append({
            "label": node.label,
            "properties": {
                name: constraint.to_dict()
                for name, constraint in sorted(node.property_constraints.items())
            },
        })

    relationships = []
    for edge in schema.edges:
        source = schema.get_node(edge.source)
        target = schema.get_node(edge.target)
        rel = {
            "type": edge.type,
            "source": source.label,
            "target": target.label,
            "properties": {
                name: constraint.to_dict()
                for name, constraint in sorted(edge.property_constraints.items())
            },
        }
        if "minCount" in edge.properties:
            rel["minCount"] = str(edge.properties["minCount"])
        if "maxCount" in edge.properties:
            rel["maxCount"] = str(edge.properties["maxCount"])
        relationships.append(rel)

    return {"nodes": nodes, "relationships": relationships}
