# src/solflat/cli.py
import sys
import argparse
import logging
import os
from pathlib import Path
from typing import List

from solflat.core.merger import display_path
from solflat.core.project import load_project_config
from solflat.core.tree import generate_import_tree
from solflat.errors import FlattenError
from solflat.flatten import flatten_with_graph
from solflat.models import FileStats, ImportGraph

LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def create_arg_parser():
    parser = argparse.ArgumentParser(
        prog="solflat",
        description="Flatten a contract and all of its imports into a single source file.",
    )
    parser.add_argument("target_path", type=str, help="The path to the contract to flatten")
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="The path to output the flattened contract (default: stdout)",
    )

    group = parser.add_argument_group("project options")
    group.add_argument("--root", type=str, default=os.getcwd(), help="The project's root path (default: cwd)")
    group.add_argument("-C", "--contracts", type=str, default=None, help="The contracts source directory")
    group.add_argument(
        "-r", "--remappings",
        action="append",
        default=[],
        help="A remapping `[context:]prefix=target`, may be repeated",
    )
    group.add_argument(
        "--lib-paths",
        action="append",
        default=[],
        help="A library search path, may be repeated (default: lib)",
    )
    group.add_argument("--no-auto-detect", action="store_true", help="Do not auto-detect library remappings")

    parser.add_argument("-j", "--jobs", type=positive_int, default=None, help="Parallel file loads (1 disables threads)")
    parser.add_argument("--tree", action="store_true", help="Print the import tree to stderr")
    parser.add_argument("--stats", action="store_true", help="Print per-file line, byte and directive counts to stderr")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="-v for progress, -vv for debug output")
    return parser


def collect_stats(ordered: List[Path], graph: ImportGraph, root: Path) -> List[FileStats]:
    """One row per file, in emission order."""
    stats = []
    for path in ordered:
        source = graph.files[path]
        stats.append(
            FileStats(
                path=path,
                rel_path=display_path(path, root),
                lines=len(source.body.splitlines()),
                size=len(source.body.encode("utf-8")),
                imports=len(source.imports),
                directives=len(source.directives),
            )
        )
    return stats


def print_stats(stats: List[FileStats], flattened: str):
    out = sys.stderr
    print("\n--- Emission Order ---", file=out)
    print(f"{'#':<4} | {'Lines':>6} | {'Bytes':>8} | {'Imports':>7} | {'Directives':>10} | File", file=out)
    print("-" * 72, file=out)
    for i, s in enumerate(stats):
        print(f"{i+1:<4} | {s.lines:>6} | {s.size:>8} | {s.imports:>7} | {s.directives:>10} | {s.rel_path}", file=out)
    print("-" * 72, file=out)
    print(f"Files: {len(stats)}", file=out)
    print(f"Directives removed from bodies: {sum(s.directives for s in stats)}", file=out)
    print(f"Flattened: {len(flattened.splitlines())} lines, {len(flattened.encode('utf-8'))} bytes", file=out)
    print("-" * 72, file=out)


def main():
    try:
        # 1. Setup
        parser = create_arg_parser()
        args = parser.parse_args()

        level = LOG_LEVELS[min(args.verbose, len(LOG_LEVELS) - 1)]
        logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
        logging.getLogger("solflat").setLevel(level)

        root_dir = Path(args.root).resolve()
        if not root_dir.is_dir():
            print(f"Error: Invalid directory '{root_dir}'", file=sys.stderr)
            sys.exit(1)

        target = Path(args.target_path).resolve()
        if not target.is_file():
            print(f"Error: Invalid target file '{target}'", file=sys.stderr)
            sys.exit(1)

        # 2. Project configuration
        config = load_project_config(
            root_dir,
            contracts=args.contracts,
            remappings=args.remappings,
            lib_paths=args.lib_paths,
            auto_detect=not args.no_auto_detect,
        )

        # 3. Flatten
        flattened, graph, ordered = flatten_with_graph(target, config, max_workers=args.jobs)

        # 4. Review
        if args.tree:
            print(generate_import_tree(graph, config.source_root), file=sys.stderr, end="")

        if args.stats:
            print_stats(collect_stats(ordered, graph, config.source_root), flattened)

        # 5. Output
        if args.output is None:
            sys.stdout.write(flattened)
            return

        output_file = Path(args.output)
        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(flattened, encoding="utf-8")
        except OSError as e:
            print(f"Error writing file: {e}", file=sys.stderr)
            sys.exit(1)
        print(f"Flattened file written at {output_file}")

    except FlattenError as e:
        print(f"Error: Failed to flatten the file: {e}", file=sys.stderr)
        sys.exit(1)

    except KeyboardInterrupt:
        print("\nCancelled.")
        sys.exit(1)


if __name__ == "__main__":
    main()
