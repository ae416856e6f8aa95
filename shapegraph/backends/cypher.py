"""
shapegraph.backends.cypher — PG schema as a Cypher script.

One node per label, carrying its property types as values, and one
relationship per (source, type, target). Loading the script into Neo4j
gives a browsable picture of the schema itself.
"""

from __future__ import annotations

import re

from shapegraph.model import SchemaEdge, SchemaGraph, SchemaNode

NODE_COLORS = (
    "#FF5733",
    "#33A1FF",
    "#33FF57",
    "#9133FF",
    "#FFDD33",
    "#FF33A1",
    "#33FFDD",
    "#A1FF33",
    "#FF8333",
    "#8333FF",
)


class CypherBackend:
    name = "cypher"
    extension = ".cypher"
    consumes = "pg_schema"

    def serialize(self, schema: SchemaGraph) -> str:
        lines = ["// Uncomment to clear the database before import", "// MATCH (n) DETACH DELETE n;", ""]
        nodes, rels = self._node_statements(schema), self._relationship_statements(schema)

        lines.append("// Create nodes")
        lines.extend(f"{q};" for q in nodes)
        if not nodes:
            lines.append("// No nodes found in schema")
        lines.append("")

        lines.append("// Create relationships")
        lines.extend(f"{q};" for q in rels)
        if not rels:
            lines.append("// No relationships found in schema")
        lines.append("")
        return "\n".join(lines)

    def statements(self, schema: SchemaGraph) -> list[str]:
        """Executable statements in order, without trailing semicolons."""
        return self._node_statements(schema) + self._relationship_statements(schema)

    # ── Nodes ────────────────────────────────────────────────────

    def _node_statements(self, schema: SchemaGraph) -> list[str]:
        queries = []
        seen: set[str] = set()
        for node in sorted(schema.nodes, key=lambda n: n.label):
            if node.label in seen:
                continue
            seen.add(node.label)
            color = NODE_COLORS[len(queries) % len(NODE_COLORS)]
            queries.append(self._create_node(node, color))
        return queries

    def _create_node(self, node: SchemaNode, color: str) -> str:
        label = node.label
        props = _bookkeeping(name=label, displayName=label, label=label, color=color)
        for name, constraint in sorted(node.property_constraints.items()):
            props[name] = constraint.datatype
        return f"CREATE ({sanitize_id(label)}:{_name(label)} {_cypher_map(props)})"

    # ── Relationships ────────────────────────────────────────────

    def _relationship_statements(self, schema: SchemaGraph) -> list[str]:
        queries = []
        seen: set[tuple[str, str, str]] = set()
        for edge in schema.edges:
            source = schema.get_node(edge.source).label
            target = schema.get_node(edge.target).label
            key = (source, edge.type, target)
            if key in seen:
                continue
            seen.add(key)
            queries.append(self._create_relationship(edge, source, target))
        return queries

    def _create_relationship(self, edge: SchemaEdge, source: str, target: str) -> str:
        props = {
            name: constraint.datatype
            for name, constraint in sorted(edge.property_constraints.items())
        }
        props.update(_bookkeeping(**{
            key: str(edge.properties[key])
            for key in ("minCount", "maxCount")
            if key in edge.properties
        }))
        rel_props = f" {_cypher_map(props)}" if props else ""
        return (
            f"MATCH (a:{_name(source)}), (b:{_name(target)})\n"
            f"CREATE (a)-[r:{_name(edge.type)}{rel_props}]->(b)"
        )


# ── Helpers ──────────────────────────────────────────────────────

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def _bookkeeping(**values: str) -> dict:
    """Display and cardinality keys, prefixed with '_' so schema property
    names never collide with them."""
    return {f"_{key}": value for key, value in values.items()}


def sanitize_id(label: str) -> str:
    """Variable name for a label: lower-case, non-alphanumerics to '_'."""
    ident = re.sub(r"[^a-z0-9]", "_", label.lower())
    if not ident or ident[0].isdigit():
        ident = "n_" + ident
    return ident


def _name(name: str) -> str:
    """Label, type or key, backtick-quoted unless a plain identifier."""
    if _IDENTIFIER.fullmatch(name):
        return name
    return "`" + name.replace("`", "``") + "`"


def _cypher_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def _cypher_map(props: dict) -> str:
    """Convert a dict of strings to a Cypher map literal."""
    parts = [f"{_name(k)}: {_cypher_string(str(v))}" for k, v in props.items()]
    return "{" + ", ".join(parts) + "}"
