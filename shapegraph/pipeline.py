"""
shapegraph.pipeline — Load -> extract -> lower -> lift, in that order.

Each stage must hand a non-empty graph to the next. Any failure stops
the run with a TransformationError naming the source and the stage.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from rdflib import Graph

from shapegraph.lifting import lift_to_rdf
from shapegraph.loader import load_shapes
from shapegraph.lowering import LoweringOptions, lower_to_pg
from shapegraph.mapping import Mapping
from shapegraph.model import SchemaGraph, StatementGraph
from shapegraph.shacl_extractor import extract_statements


class TransformationError(Exception):
    """A pipeline stage failed; the whole run is aborted."""

    def __init__(self, message: str, source: str, stage: str, cause: Optional[BaseException] = None):
        super().__init__(f"{message} [source={source}, stage={stage}]")
        self.source = source
        self.stage = stage
        self.cause = cause


@dataclass
class PipelineResult:
    source: str
    statements: StatementGraph
    pg_schema: SchemaGraph
    rdf: Graph


def run_pipeline(
    source: Union[str, Path, Graph],
    mapping: Optional[Mapping] = None,
    options: Optional[LoweringOptions] = None,
    source_name: Optional[str] = None,
) -> PipelineResult:
    """Run every stage over `source` (a path, Turtle text or parsed Graph)."""

    name = source_name or _describe(source)

    stage = "load"
    try:
        shapes = source if isinstance(source, Graph) else load_shapes(source)
        if len(shapes) == 0:
            raise TransformationError("No triples in input", name, stage)

        stage = "extract"
        statements = extract_statements(shapes, mapping=mapping)
        if statements.is_empty():
            raise TransformationError("No shapes with a sh:targetClass found", name, stage)

        stage = "lower"
        pg_schema = lower_to_pg(statements, mapping=mapping, options=options)
        if pg_schema.is_empty():
            raise TransformationError("Lowering produced an empty PG schema", name, stage)

        stage = "lift"
        rdf = lift_to_rdf(statements)
        if len(rdf) == 0:
            raise TransformationError("Lifting produced no triples", name, stage)
    except TransformationError:
        raise
    except Exception as e:
        raise TransformationError(f"{type(e).__name__}: {e}", name, stage, cause=e) from e

    return PipelineResult(source=name, statements=statements, pg_schema=pg_schema, rdf=rdf)


def _describe(source) -> str:
    if isinstance(source, Graph):
        return "<graph>"
    if isinstance(source, Path):
        return str(source)
    if "\n" in source:
        return "<string>"
    return source
