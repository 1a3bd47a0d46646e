# src/solflat/core/merger.py
import logging
from pathlib import Path
from typing import Iterator, List, Optional, Set, Tuple

from solflat.config import FILE_MARKER
from solflat.errors import CycleError
from solflat.models import Directive, DirectiveKind, ImportGraph

logger = logging.getLogger(__name__)


def order(graph: ImportGraph) -> List[Path]:
    """
    Depth-first post-order from the target: every file comes after all the
    files it imports. Siblings keep their import order.
    Raises CycleError with the full cycle, e.g. [A, B, A].
    """
    emitted: List[Path] = []
    done: Set[Path] = set()
    in_progress = {graph.target}
    trail = [graph.target]
    stack: List[Tuple[Path, Iterator[Path]]] = [(graph.target, iter(graph.dependencies(graph.target)))]

    while stack:
        node, deps = stack[-1]
        for dep in deps:
            if dep in done:
                continue
            if dep in in_progress:
                raise CycleError(trail[trail.index(dep):] + [dep])
            in_progress.add(dep)
            trail.append(dep)
            stack.append((dep, iter(graph.dependencies(dep))))
            break
        else:
            stack.pop()
            trail.pop()
            in_progress.discard(node)
            done.add(node)
            emitted.append(node)

    return emitted


def collect_directives(ordered_files: List[Path], graph: ImportGraph) -> List[Directive]:
    """Distinct licenses, then distinct pragmas, each in first-seen order."""
    seen = set()
    licenses: List[Directive] = []
    pragmas: List[Directive] = []

    for path in ordered_files:
        for directive in graph.files[path].directives:
            if directive.key in seen:
                continue
            seen.add(directive.key)
            if directive.kind is DirectiveKind.LICENSE:
                licenses.append(directive)
            else:
                pragmas.append(directive)

    return licenses + pragmas


def display_path(path: Path, root: Optional[Path] = None) -> str:
    if root is not None:
        try:
            return path.relative_to(root).as_posix()
        except ValueError:
            pass
    return path.as_posix()


def merge(ordered_files: List[Path], graph: ImportGraph, root: Optional[Path] = None) -> str:
    parts = []

    directives = collect_directives(ordered_files, graph)
    if directives:
        parts.append("\n".join(d.text for d in directives))

    for path in ordered_files:
        block = FILE_MARKER.format(path=display_path(path, root))
        body = graph.files[path].body
        if body:
            block = f"{block}\n\n{body}"
        parts.append(block)

    logger.debug("Merged %d file(s) with %d directive(s)", len(ordered_files), len(directives))
    return "\n\n".join(parts) + "\n"
