"""
shapegraph.mapping — Naming conventions between RDF IRIs and PG names.

Holds the one datatype table every stage and backend reads from, and the
Mapping that turns class / predicate IRIs into node labels, property
names and relationship types.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional


# ─── Local names ─────────────────────────────────────────────────────


def local_name(iri: str) -> str:
    """Fragment after the last '#', else after the last '/', else the IRI.

    Lossy: two namespaces sharing a local name collapse onto one name.
    """
    if "#" in iri:
        return iri.rsplit("#", 1)[1]
    if "/" in iri:
        return iri.rsplit("/", 1)[1]
    return iri


_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALNUM = re.compile(r"[^A-Z0-9_]+")


def to_upper_snake(name: str) -> str:
    """Convert camelCase to UPPER_SNAKE_CASE.

    underName -> UNDER_NAME, has-part -> HAS_PART
    """
    upper = _CAMEL_BOUNDARY.sub(r"\1_\2", name).upper()
    return _NON_ALNUM.sub("_", upper)


def to_camel(rel_type: str) -> str:
    """Inverse of to_upper_snake for the common case: UNDER_NAME -> underName."""
    parts = [p for p in rel_type.split("_") if p]
    if not parts:
        return rel_type
    return parts[0].lower() + "".join(p.capitalize() for p in parts[1:])


# ─── XSD type mapping ────────────────────────────────────────────────

XSD = "http://www.w3.org/2001/XMLSchema#"

PG_TYPES = ("String", "Integer", "Float", "Boolean", "Date", "DateTime")

XSD_TO_PG_TYPE = {
    f"{XSD}string": "String",
    f"{XSD}integer": "Integer",
    f"{XSD}int": "Integer",
    f"{XSD}float": "Float",
    f"{XSD}double": "Float",
    f"{XSD}boolean": "Boolean",
    f"{XSD}date": "Date",
    f"{XSD}dateTime": "DateTime",
}

# First XSD entry per PG type wins, so Integer -> xsd:integer, Float -> xsd:float
PG_TYPE_TO_XSD: dict[str, str] = {}
for _iri, _pg_type in XSD_TO_PG_TYPE.items():
    PG_TYPE_TO_XSD.setdefault(_pg_type, _iri)


def map_datatype(iri: Optional[str]) -> str:
    """Map an XSD datatype IRI to a PG type. Unknown or missing -> String."""
    if iri is None:
        return "String"
    return XSD_TO_PG_TYPE.get(str(iri), "String")


def xsd_for(pg_type: str) -> str:
    """XSD datatype IRI for a PG type; unknown types fall back to xsd:string."""
    return PG_TYPE_TO_XSD.get(pg_type, f"{XSD}string")


# ─── Mapping ─────────────────────────────────────────────────────────


@dataclass
class Mapping:
    """Maps between RDF IRIs and PG names.

    Uses convention-based defaults: the local name of an IRI becomes the
    PG label or property name, and relationship types are the local name
    in UPPER_SNAKE_CASE.

    Users can override with explicit mappings.
    """

    classes_to_labels: dict[str, str] = field(default_factory=dict)
    predicates_to_relationships: dict[str, str] = field(default_factory=dict)
    predicates_to_properties: dict[str, str] = field(default_factory=dict)

    def label_for(self, iri: str) -> str:
        if iri in self.classes_to_labels:
            return self.classes_to_labels[iri]
        return local_name(iri)

    def property_for(self, iri: str) -> str:
        if iri in self.predicates_to_properties:
            return self.predicates_to_properties[iri]
        # Property names keep their case: bookingAgent stays bookingAgent
        return local_name(iri)

    def relationship_for(self, iri: str) -> str:
        if iri in self.predicates_to_relationships:
            return self.predicates_to_relationships[iri]
        return to_upper_snake(local_name(iri))
