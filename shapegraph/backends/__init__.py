"""
shapegraph.backends — Serializer protocol for output artifacts.

Each backend turns a terminal artifact of the pipeline (the PG
SchemaGraph, or the lifted rdflib Graph for Turtle) into text.
"""

from __future__ import annotations

from typing import Any, Protocol


class Serializer(Protocol):
    """Interface that every output backend must implement."""

    name: str
    # Suffix appended to the input file's stem when written to disk
    extension: str
    # PipelineResult attribute holding the artifact: "pg_schema" or "rdf"
    consumes: str

    def serialize(self, artifact: Any) -> str:
        """Render `artifact` as text in this backend's format."""
        ...
