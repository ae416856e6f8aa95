"""
shapegraph.validator — Check would-be instances against a PG schema.

Not part of the transformation path. A value that is a list counts as
len(list) values; anything else counts as one. A missing key or a None
value counts as zero.
"""

from __future__ import annotations

from typing import Any, Optional

from shapegraph.model import SchemaGraph, SchemaNode


def value_count(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, (list, tuple)):
        return len(value)
    return 1


def violations(node: SchemaNode, values: dict) -> list[str]:
    """Human-readable reasons `values` does not satisfy `node`'s constraints."""
    problems = []
    for name, constraint in sorted(node.property_constraints.items()):
        count = value_count(values.get(name))
        if constraint.required and count == 0:
            problems.append(f"{node.label}.{name} is required")
        elif not constraint.allows(count):
            bound = "*" if constraint.unbounded else constraint.max_count
            problems.append(
                f"{node.label}.{name} has {count} value(s), "
                f"expected {constraint.min_count}..{bound}"
            )
    return problems


def check_instance(node: SchemaNode, values: dict) -> bool:
    return not violations(node, values)


def validate_instance(schema: SchemaGraph, label: str, values: dict) -> bool:
    """Validate `values` against the node labelled `label`.

    Raises KeyError if the schema has no such label.
    """
    node = schema.find_by_label(label)
    if node is None:
        raise KeyError(f"No node labelled {label!r} in schema {schema.name!r}")
    return check_instance(node, values)


def validate_schema(schema: SchemaGraph, label: Optional[str] = None) -> bool:
    """Validate each node's own property bag as a would-be instance."""
    nodes = schema.nodes if label is None else [n for n in schema.nodes if label in n.labels]
    return all(check_instance(node, node.properties) for node in nodes)
