# src/solflat/flatten.py
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from solflat.core.graph import build_graph
from solflat.core.loader import SourceLoader
from solflat.core.merger import merge, order
from solflat.core.resolver import canonicalize
from solflat.models import ImportGraph, ProjectConfig

logger = logging.getLogger(__name__)


def flatten_with_graph(
    target_path: Path,
    config: ProjectConfig,
    *,
    max_workers: Optional[int] = None,
) -> Tuple[str, ImportGraph, List[Path]]:
    """
    Flattens `target_path` and also hands back the import graph and the
    emission order it was built from.
    """
    loader = SourceLoader()
    graph = build_graph(Path(target_path), config, loader=loader, max_workers=max_workers)
    ordered = order(graph)
    root = canonicalize(config.source_root)
    text = merge(ordered, graph, root=root)

    logger.info("Flattened %s (%d files, %d reads)", graph.target.name, len(ordered), loader.reads)
    return text, graph, ordered


def flatten(target_path: Path, config: ProjectConfig, *, max_workers: Optional[int] = None) -> str:
    """
    Returns a single source text holding `target_path` and everything it
    transitively imports, with no import statements left.

    Raises a FlattenError subclass on any failure; nothing is returned then.
    """
    text, _, _ = flatten_with_graph(target_path, config, max_workers=max_workers)
    return text
