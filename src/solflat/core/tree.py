# src/solflat/core/tree.py
from pathlib import Path
from typing import List, Optional, Set

from solflat.core.merger import display_path
from solflat.models import ImportGraph


def generate_import_tree(graph: ImportGraph, root: Optional[Path] = None) -> str:
    """
    Generates a string representation of the import tree under the target.
    A file already expanded elsewhere is shown once more with a `(*)` mark.
    """
    lines = [display_path(graph.target, root)]
    expanded: Set[Path] = {graph.target}

    def _generate_lines_recursive(node: Path, prefix: str, ancestors: List[Path]):
        deps = graph.dependencies(node)
        for i, dep in enumerate(deps):
            is_last = (i == len(deps) - 1)
            connector = "└── " if is_last else "├── "
            name = display_path(dep, root)

            if dep in ancestors:
                lines.append(f"{prefix}{connector}{name} (cycle)")
                continue
            if dep in expanded:
                lines.append(f"{prefix}{connector}{name} (*)")
                continue

            expanded.add(dep)
            lines.append(f"{prefix}{connector}{name}")
            new_prefix = prefix + ("    " if is_last else "│   ")
            _generate_lines_recursive(dep, new_prefix, ancestors + [dep])

    _generate_lines_recursive(graph.target, "", [graph.target])
    return "\n".join(lines) + "\n"
