# src/main.py — v2
"""CLI entry point — infer, modules, process-groups, dedup-flows commands.

Usage:
    archinfer infer <snapshot.json> [-o result.json] [options]
    archinfer modules <snapshot.json> [-o modules.json] [options]
    archinfer process-groups <snapshot.json> [-o groups.json] [--skip-empty]
    archinfer dedup-flows <snapshot.json> [-o flows.json] [--min-overlap R]

Every command reads a JSON store snapshot and prints JSON to stdout, or
writes it to the ``-o`` path. Logs go to stderr.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from archinfer.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = _load_settings(args)
        _setup_logging(settings, args.verbose)
        return args.func(args, settings)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="archinfer",
        description=f"archinfer v{__version__} - architecture inference from call graphs",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- infer ---
    p_infer = subparsers.add_parser(
        "infer", help="Run the full inference pipeline",
    )
    _add_common_arguments(p_infer)
    _add_community_arguments(p_infer)
    p_infer.set_defaults(func=_cmd_infer)

    # --- modules ---
    p_modules = subparsers.add_parser(
        "modules", help="Detect modules and member cohesion",
    )
    _add_common_arguments(p_modules)
    _add_community_arguments(p_modules)
    p_modules.set_defaults(func=_cmd_modules)

    # --- process-groups ---
    p_groups = subparsers.add_parser(
        "process-groups", help="Classify modules into process groups",
    )
    _add_common_arguments(p_groups)
    _add_community_arguments(p_groups)
    p_groups.add_argument(
        "--skip-empty", action="store_true", default=None,
        help="Leave isolated file-less groups out of cross-group pairs",
    )
    p_groups.set_defaults(func=_cmd_process_groups)

    # --- dedup-flows ---
    p_flows = subparsers.add_parser(
        "dedup-flows", help="Deduplicate flow candidates",
    )
    _add_common_arguments(p_flows)
    p_flows.add_argument(
        "--min-overlap", type=float, default=None, dest="flow_min_overlap_ratio",
        help="Interaction overlap ratio at which flows are redundant (default: 0.5)",
    )
    p_flows.set_defaults(func=_cmd_dedup_flows)

    return parser


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("snapshot", type=Path, help="Path to store snapshot JSON")
    parser.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Write JSON here instead of stdout",
    )


def _add_community_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--resolution", type=float, default=None, dest="community_resolution",
        help="Louvain resolution (default: 1.0)",
    )
    parser.add_argument(
        "--min-size", type=int, default=None, dest="community_min_size",
        help="Smallest community emitted as a module (default: 3)",
    )
    parser.add_argument(
        "--levels", type=int, default=None, dest="louvain_max_levels",
        help="Louvain aggregation levels (default: 1)",
    )


_OVERRIDE_FIELDS = (
    "community_resolution",
    "community_min_size",
    "louvain_max_levels",
    "flow_min_overlap_ratio",
)


def _load_settings(args: argparse.Namespace) -> Any:
    from archinfer.config.settings import load_settings

    overrides: dict[str, Any] = {
        name: getattr(args, name)
        for name in _OVERRIDE_FIELDS
        if getattr(args, name, None) is not None
    }
    if getattr(args, "skip_empty", None):
        overrides["cross_process_skip_empty_groups"] = True
    return load_settings(**overrides)


def _cmd_infer(args: argparse.Namespace, settings: Any) -> int:
    """Run the full pipeline and emit the ArchitectureResult."""
    from archinfer.api.facade import infer_architecture
    from archinfer.storage.snapshot import load_snapshot

    result = infer_architecture(load_snapshot(args.snapshot), settings)
    _emit(result, args.output)
    return 0


def _cmd_modules(args: argparse.Namespace, settings: Any) -> int:
    """Emit modules, memberships and partition statistics."""
    from archinfer.api.facade import infer_architecture
    from archinfer.storage.snapshot import load_snapshot

    result = infer_architecture(load_snapshot(args.snapshot), settings)
    _emit({
        "codebase_id": result.codebase_id,
        "modularity": result.partition.modularity,
        "iterations": result.partition.iterations,
        "unassigned": result.partition.unassigned,
        "modules": [m.model_dump(mode="json") for m in result.modules],
        "memberships": [m.model_dump(mode="json") for m in result.memberships],
    }, args.output)
    return 0


def _cmd_process_groups(args: argparse.Namespace, settings: Any) -> int:
    """Emit process groups with labels and cross-group pairs."""
    from archinfer.api.facade import infer_architecture
    from archinfer.storage.snapshot import load_snapshot

    result = infer_architecture(load_snapshot(args.snapshot), settings)
    _emit({
        "codebase_id": result.codebase_id,
        "module_to_group": result.process_groups.module_to_group,
        "groups": [g.model_dump(mode="json") for g in result.group_summaries],
        "cross_group_pairs": [list(pair) for pair in result.cross_group_pairs],
        "issues": [i.model_dump(mode="json") for i in result.issues],
    }, args.output)
    return 0


def _cmd_dedup_flows(args: argparse.Namespace, settings: Any) -> int:
    """Deduplicate the snapshot's flow candidates only."""
    from archinfer.flows.dedup import FlowDeduplicator
    from archinfer.storage.snapshot import load_snapshot

    snapshot = load_snapshot(args.snapshot)
    flows = FlowDeduplicator(settings.flow_min_overlap_ratio).dedup(snapshot.flows)
    _emit(flows, args.output)
    return 0


def _emit(result: Any, output: Path | None) -> None:
    """Print ``result`` as JSON, or write it to ``output``."""
    from archinfer.storage.snapshot import dump_result, write_result

    if output is None:
        print(dump_result(result))
    else:
        write_result(result, output)


def _setup_logging(settings: Any, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from archinfer.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
