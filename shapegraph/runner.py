"""
shapegraph.runner — File-level glue around the pipeline.

Writes the artifacts of one schema file, loads a PG schema into Neo4j,
and watches a directory for new schema files.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from shapegraph.backends import Serializer
from shapegraph.backends.cypher import CypherBackend
from shapegraph.backends.dot import DotBackend
from shapegraph.backends.pg_json import PgJsonBackend
from shapegraph.backends.turtle import TurtleBackend
from shapegraph.lowering import LoweringOptions
from shapegraph.mapping import Mapping
from shapegraph.model import SchemaGraph
from shapegraph.pipeline import PipelineResult, TransformationError, run_pipeline

# Files we write ourselves; the watcher must not feed them back in
GENERATED_MARKERS = ("_transformed", "_pg_schema", "_cypher")


# ─── Artifacts ───────────────────────────────────────────────────────


@dataclass
class TransformOutput:
    result: PipelineResult
    files: dict[str, Path] = field(default_factory=dict)


def default_backends() -> list[Serializer]:
    return [PgJsonBackend(), TurtleBackend(), CypherBackend(), DotBackend()]


def render_artifacts(
    result: PipelineResult,
    backends: Optional[list[Serializer]] = None,
) -> dict[str, str]:
    """Backend name -> text, for every output format."""
    if backends is None:
        backends = default_backends()
    return {
        backend.name: backend.serialize(getattr(result, backend.consumes))
        for backend in backends
    }


def transform_schema(
    path: Union[str, Path],
    output_dir: Optional[Union[str, Path]] = None,
    mapping: Optional[Mapping] = None,
    options: Optional[LoweringOptions] = None,
) -> TransformOutput:
    """Run the pipeline on `path` and write its artifacts.

    Outputs go next to the input unless `output_dir` is given:
    <stem>_pg_schema.json, <stem>_transformed.ttl, <stem>.cypher, <stem>.dot
    """

    path = Path(path)
    if not path.is_file():
        raise TransformationError("Schema file not found", str(path), "load")

    result = run_pipeline(path, mapping=mapping, options=options)

    out_dir = Path(output_dir) if output_dir is not None else path.parent
    out_dir.mkdir(parents=True, exist_ok=True)

    output = TransformOutput(result=result)
    backends = default_backends()
    rendered = render_artifacts(result, backends)
    for backend in backends:
        target = out_dir / f"{path.stem}{backend.extension}"
        target.write_text(rendered[backend.name])
        output.files[backend.name] = target
    return output


# ─── Load into Neo4j ─────────────────────────────────────────────────


def load_into_neo4j(
    schema: SchemaGraph,
    driver,  # neo4j.Driver (not type-hinted to avoid hard dependency)
    database: Optional[str] = None,
    clear: bool = False,
) -> int:
    """Create the schema's Cypher picture in Neo4j. Returns statements run."""

    statements = CypherBackend().statements(schema)
    with driver.session(database=database) as session:
        if clear:
            session.run("MATCH (n) DETACH DELETE n")
        for query in statements:
            session.run(query)
    return len(statements)


# ─── Watch a directory ───────────────────────────────────────────────


def should_transform(path: Union[str, Path]) -> bool:
    """True for .ttl files that are not our own outputs."""
    path = Path(path)
    if path.suffix != ".ttl":
        return False
    return not any(marker in path.stem for marker in GENERATED_MARKERS)


def handle_new_file(path: Union[str, Path], output_dir: Optional[Union[str, Path]] = None) -> Optional[TransformOutput]:
    """Transform one file seen by the watcher.

    A failing file is reported on stderr and does not stop the watcher.
    """
    if not should_transform(path):
        return None
    try:
        output = transform_schema(path, output_dir=output_dir)
    except TransformationError as e:
        print(f"Error transforming {path}: {e}", file=sys.stderr)
        return None
    print(f"Transformed {path}")
    return output


def watch_directory(
    path: Union[str, Path],
    output_dir: Optional[Union[str, Path]] = None,
    polling: bool = False,
):
    """Start a watchdog observer transforming every new .ttl file in `path`.

    Returns the running observer; call .stop() and .join() on it when done.
    """

    from watchdog.events import FileSystemEventHandler
    from watchdog.observers import Observer
    from watchdog.observers.polling import PollingObserver

    class SchemaFileHandler(FileSystemEventHandler):
        def on_created(self, event):
            if not event.is_directory:
                handle_new_file(event.src_path, output_dir)

        def on_moved(self, event):
            if not event.is_directory:
                handle_new_file(event.dest_path, output_dir)

    watch_path = Path(path)
    if not watch_path.is_dir():
        raise NotADirectoryError(f"Not a directory: {watch_path}")

    observer = PollingObserver() if polling else Observer()
    observer.schedule(SchemaFileHandler(), str(watch_path), recursive=False)
    observer.start()
    return observer
