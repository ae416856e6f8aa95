"""
shapegraph.backends.dot — PG schema as Graphviz DOT.

Record-shaped nodes list their property constraints; edges are labelled
with the relationship type and any edge-scoped properties.
"""

from __future__ import annotations

from shapegraph.model import PropertyConstraint, SchemaGraph


class DotBackend:
    name = "dot"
    extension = ".dot"
    consumes = "pg_schema"

    def __init__(self, rankdir: str = "LR"):
        self.rankdir = rankdir

    def serialize(self, schema: SchemaGraph) -> str:
        lines = [
            f"digraph {_quote(schema.name)} {{",
            f"  rankdir={self.rankdir};",
            '  node [shape=record, fontname="Helvetica"];',
            '  edge [fontname="Helvetica", fontsize=10];',
        ]

        for node in sorted(schema.nodes, key=lambda n: n.label):
            fields = "".join(
                _record_escape(_describe(c)) + "\\l"
                for _, c in sorted(node.property_constraints.items())
            )
            record = "{" + _record_escape(node.label) + ("|" + fields if fields else "") + "}"
            lines.append(f"  {_quote(node.id)} [label={_quote(record)}];")

        for edge in schema.edges:
            label_lines = [f"{edge.type} [{_bounds(edge.min_count, edge.max_count)}]"]
            label_lines.extend(_describe(c) for _, c in sorted(edge.property_constraints.items()))
            label = "\\n".join(label_lines)
            lines.append(f"  {_quote(edge.source)} -> {_quote(edge.target)} [label={_quote(label)}];")

        lines.append("}")
        return "\n".join(lines) + "\n"


def _bounds(min_count: int, max_count: int) -> str:
    return f"{min_count}..{'*' if max_count < 0 else max_count}"


def _describe(c: PropertyConstraint) -> str:
    return f"{c.name}: {c.datatype} [{_bounds(c.min_count, c.max_count)}]"


def _record_escape(text: str) -> str:
    for ch in "{}|<>":
        text = text.replace(ch, "\\" + ch)
    return text


def _quote(text: str) -> str:
    # Backslashes are left alone: record and label escapes must reach Graphviz
    return '"' + text.replace('"', '\\"') + '"'
