"""
shapegraph.loader — Read SHACL/Turtle into an rdflib Graph.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

from rdflib import Graph


def load_shapes(source: Union[str, Path], format: str = "turtle") -> Graph:
    """Parse a shapes document given as a file path or as Turtle text."""
    g = Graph()
    if isinstance(source, Path) or _looks_like_path(source):
        g.parse(source=str(source), format=format)
    else:
        g.parse(data=source, format=format)
    return g


def _looks_like_path(source: str) -> bool:
    if "\n" in source or len(source) > 1024:
        return False
    return Path(source).is_file()
