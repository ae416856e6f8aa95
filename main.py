"""shapegraph — SHACL -> property-graph schema CLI.

Usage:
    python main.py --input FILE [--format json|turtle|cypher|dot]
    python main.py --input FILE --output-dir DIR
    python main.py --input-dir DIR --output-dir DIR
    python main.py --watch DIR [--output-dir DIR]
    python main.py --input FILE --neo4j-uri bolt://localhost:7687 --neo4j-password ...
"""
from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from shapegraph.pipeline import TransformationError, run_pipeline
from shapegraph.runner import (
    load_into_neo4j,
    render_artifacts,
    should_transform,
    transform_schema,
    watch_directory,
)

FORMATS = ("json", "turtle", "cypher", "dot")


def convert_batch(input_dir: str, output_dir: str | None) -> tuple[int, int]:
    """Transform every schema file in a directory.

    Returns:
        (success_count, failure_count)
    """
    ok = 0
    fail = 0
    for path in sorted(Path(input_dir).glob("*.ttl")):
        if not should_transform(path):
            continue
        try:
            transform_schema(path, output_dir=output_dir)
            print(f"  OK  {path.name}")
            ok += 1
        except TransformationError as e:
            print(f"  FAIL {path.name}: {e}")
            fail += 1
    return ok, fail


def watch(directory: str, output_dir: str | None) -> None:
    observer = watch_directory(directory, output_dir=output_dir)
    print(f"Watching {directory} for new .ttl files (Ctrl+C to stop)")
    try:
        while observer.is_alive():
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        observer.stop()
        observer.join()


def push_to_neo4j(args, result) -> int:
    from neo4j import GraphDatabase

    driver = GraphDatabase.driver(args.neo4j_uri, auth=(args.neo4j_user, args.neo4j_password))
    try:
        return load_into_neo4j(result.pg_schema, driver, database=args.neo4j_database, clear=args.clear)
    finally:
        driver.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="SHACL -> property-graph schema transformer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--input", "-i", help="Input SHACL/Turtle file")
    parser.add_argument("--input-dir", help="Transform every .ttl file in this directory")
    parser.add_argument(
        "--format", "-f",
        choices=FORMATS,
        default="json",
        help="Format printed to stdout when no --output-dir is given (default: json)",
    )
    parser.add_argument("--output-dir", "-o", help="Write all artifacts to this directory")
    parser.add_argument("--watch", metavar="DIR", help="Watch DIR and transform new .ttl files")
    parser.add_argument("--neo4j-uri", help="Load the PG schema into Neo4j at this bolt URI")
    parser.add_argument("--neo4j-user", default="neo4j")
    parser.add_argument("--neo4j-password", default="")
    parser.add_argument("--neo4j-database", default=None)
    parser.add_argument("--clear", action="store_true", help="Delete everything in Neo4j before loading")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.watch:
        watch(args.watch, args.output_dir)
        return 0

    if args.input_dir:
        ok, fail = convert_batch(args.input_dir, args.output_dir)
        print(f"\nResult: {ok} converted, {fail} failed")
        return 1 if fail else 0

    if not args.input:
        parser.print_help()
        return 2

    try:
        if args.output_dir:
            output = transform_schema(args.input, output_dir=args.output_dir)
            for path in output.files.values():
                print(f"Wrote {path}")
            result = output.result
        else:
            result = run_pipeline(Path(args.input))
            print(render_artifacts(result)[args.format])
    except TransformationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.neo4j_uri:
        count = push_to_neo4j(args, result)
        print(f"Loaded {count} statements into {args.neo4j_uri}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
