"""
shapegraph — SHACL shapes to property-graph schemas and back.
"""

from shapegraph.lifting import lift_to_rdf, pg_to_statements
from shapegraph.loader import load_shapes
from shapegraph.lowering import ConflictPolicy, ConstraintConflictError, LoweringOptions, Shim, lower_to_pg
from shapegraph.mapping import Mapping, map_datatype
from shapegraph.model import SchemaGraph, SchemaWarning, StatementGraph
from shapegraph.pipeline import PipelineResult, TransformationError, run_pipeline
from shapegraph.shacl_extractor import extract_statements

__version__ = "0.1.0"

__all__ = [
    "ConflictPolicy",
    "ConstraintConflictError",
    "LoweringOptions",
    "Mapping",
    "PipelineResult",
    "SchemaGraph",
    "SchemaWarning",
    "Shim",
    "StatementGraph",
    "TransformationError",
    "extract_statements",
    "lift_to_rdf",
    "load_shapes",
    "lower_to_pg",
    "map_datatype",
    "pg_to_statements",
    "run_pipeline",
]
