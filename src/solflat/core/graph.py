# src/solflat/core/graph.py
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

from solflat.core.loader import SourceLoader
from solflat.core.resolver import canonicalize, resolve
from solflat.errors import GraphError, ResolutionError
from solflat.models import ImportGraph, ProjectConfig, SourceFile

logger = logging.getLogger(__name__)


class ImportGraphBuilder:
    def __init__(self, config: ProjectConfig, loader: Optional[SourceLoader] = None, max_workers: Optional[int] = None):
        self.config = config
        self.loader = loader or SourceLoader()
        self.max_workers = max_workers

    def _resolve_imports(self, source: SourceFile) -> List[Path]:
        deps: List[Path] = []
        for statement in source.imports:
            if not statement.specifier:
                raw = " ".join(source.content[statement.start:statement.end].split())
                raise GraphError(source.path, raw)
            try:
                resolved = resolve(statement.specifier, source.path, self.config)
            except ResolutionError as e:
                raise GraphError(source.path, statement.specifier, e) from e
            if resolved not in deps:
                deps.append(resolved)
        return deps

    def build(self, target: Path) -> ImportGraph:
        """
        Breadth-first walk from `target`. Each frontier level is loaded in
        parallel, then processed in discovery order so the graph, and any
        error raised, is the same on every run.
        """
        target = canonicalize(target)
        graph = ImportGraph(target=target)
        visited = {target}
        frontier = [target]

        executor = None
        if self.max_workers != 1:
            executor = ThreadPoolExecutor(max_workers=self.max_workers)

        try:
            while frontier:
                if executor is not None and len(frontier) > 1:
                    sources = list(executor.map(self.loader.load, frontier))
                else:
                    sources = [self.loader.load(p) for p in frontier]

                next_frontier = []
                for source in sources:
                    deps = self._resolve_imports(source)
                    graph.files[source.path] = source
                    graph.edges[source.path] = tuple(deps)
                    for dep in deps:
                        if dep not in visited:
                            visited.add(dep)
                            next_frontier.append(dep)

                logger.debug("Loaded %d file(s), %d queued", len(sources), len(next_frontier))
                frontier = next_frontier
        finally:
            if executor is not None:
                executor.shutdown(wait=True)

        return graph


def build_graph(
    target: Path,
    config: ProjectConfig,
    loader: Optional[SourceLoader] = None,
    max_workers: Optional[int] = None,
) -> ImportGraph:
    return ImportGraphBuilder(config, loader=loader, max_workers=max_workers).build(target)
