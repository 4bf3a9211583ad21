"""Command line interface for checking and inspecting configuration documents."""

from __future__ import annotations

import argparse
import json
import sys
import time
from contextlib import contextmanager
from pathlib import Path

import networkx as nx

from rtxconf.errors import DocumentError, StrictLoadError
from rtxconf.factory import CONFIG_VERSION, ConfigFactory
from rtxconf.log_config import get_logger
from rtxconf.schema import GROUP_SECTIONS, LIST_SECTIONS
from rtxconf.settings import ConfigDocument

logger = get_logger(__name__)


@contextmanager
def Timer(description: str):
    """Context manager for timing operations with both print and log output.

    Args:
        description: Operation description for timing messages.

    Yields:
        None: Context manager yields nothing.
    """
    print(f"🔄 {description}...")
    logger.info(f"Starting {description}")
    start = time.time()
    try:
        yield
        elapsed = time.time() - start
        print(f"✅ {description} (completed in {elapsed:.1f}s)")
        logger.info(f"Completed {description} in {elapsed:.1f}s")
    except Exception as e:
        elapsed = time.time() - start
        print(f"❌ {description} (failed after {elapsed:.1f}s)")
        logger.error(f"Failed {description} after {elapsed:.1f}s: {e}")
        raise


def _load_config(config_path: Path, *, strict: bool = False) -> ConfigFactory:
    """Load a configuration document.

    Args:
        config_path: Path to YAML configuration file.
        strict: Fail when any entity, reference, or binding was skipped.

    Returns:
        Factory holding the loaded object graph.

    Raises:
        SystemExit: Code 2 if the document is unusable, code 3 if a strict
            load skipped anything.
    """
    try:
        factory = ConfigFactory(strict=strict).load_config_file(config_path)
        logger.info(f"Loaded configuration from {config_path}")
        return factory
    except DocumentError as e:
        logger.error(f"Failed to load config: {e}")
        print(f"❌ Configuration error: {e}")
        print(f"💡 Check YAML syntax in: {config_path}")
        sys.exit(2)  # Config problem
    except StrictLoadError as e:
        logger.error(f"Strict load failed: {e}")
        print(f"❌ {e}")
        print("💡 Run without --strict to see every diagnostic")
        sys.exit(3)  # Validation failure


def _print_diagnostics(factory: ConfigFactory) -> None:
    diagnostics = list(factory.diagnostics)
    if not diagnostics:
        return
    print(f"\nDiagnostics ({len(diagnostics)})")
    print("=" * 20)
    for diag in diagnostics:
        print(f"   {diag.kind.value}: {diag}")


def load_command(args: argparse.Namespace) -> None:
    """Load a configuration and report what was built and skipped.

    Args:
        args: Parsed command line arguments containing config path and flags.
    """
    config_path = Path(args.config)
    try:
        with Timer("Configuration load"):
            factory = _load_config(config_path, strict=args.strict)
    except SystemExit:
        raise
    except Exception as e:
        logger.error(f"Load failed: {e}")
        print("💡 Use -v for detailed error information")
        sys.exit(1)  # Runtime error

    print(factory.summary())
    _print_diagnostics(factory)
    skipped = factory.diagnostics.skipped()
    if skipped:
        print(f"⚠️  {skipped} configured items were skipped")
    else:
        print(f"🎉 SUCCESS! Loaded configuration: {config_path}")


def info_command(args: argparse.Namespace) -> None:
    """Show the sections of a configuration and their entry counts.

    Only the document is parsed; nothing is built.

    Args:
        args: Parsed command line arguments containing config file path.
    """
    config_path = Path(args.config)
    try:
        document = ConfigDocument.from_file(config_path)
    except DocumentError as e:
        print(f"❌ Configuration error: {e}")
        sys.exit(2)  # Config problem

    try:
        print("Configuration")
        print("=" * 30)
        print(f"Source: {document.path}")
        version = document.get("version", str, "-")
        support = "✅" if version == CONFIG_VERSION else "⚠️ "
        print(f"Version: {support} {version} (supported: {CONFIG_VERSION})")

        print("\nSections")
        print("=" * 20)
        for section in LIST_SECTIONS:
            node = document.section(section)
            count = len(node.children()) if node is not None else 0
            print(f"{section}: {count} entries")
        for section in GROUP_SECTIONS:
            present = "✅" if document.section(section) is not None else "❌"
            print(f"{section}: {present}")

        if document.exists("configuration.model.file"):
            model_path = document.resolve_path(
                document.get("configuration.model.file")
            )
            status = "✅" if model_path.exists() else "❌"
            print(f"\nModel file: {status} {model_path}")
    except Exception as e:
        print(f"❌ Error reading configuration: {e}")
        sys.exit(1)


def graph_command(args: argparse.Namespace) -> None:
    """Export the time-series dependency graph as node-link JSON.

    Args:
        args: Parsed command line arguments containing config and output paths.
    """
    try:
        factory = _load_config(Path(args.config))
        graph = factory.dependency_graph()
        data = nx.node_link_data(graph, edges="edges")
        text = json.dumps(data, indent=2, sort_keys=True)
        if args.output:
            output_path = Path(args.output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(text + "\n", encoding="utf-8")
            logger.info(f"Wrote dependency graph to {output_path}")
            print(
                f"📊 Dependency graph: {graph.number_of_nodes()} nodes, "
                f"{graph.number_of_edges()} edges -> {output_path}"
            )
        else:
            print(text)
    except SystemExit:
        raise
    except Exception as e:
        print(f"❌ ERROR: {e}")
        sys.exit(1)


def main() -> None:
    """Parse command line arguments and execute the appropriate subcommand.

    Configures logging, parses CLI arguments, and dispatches to the correct
    command function (load, info, or graph).
    """
    parser = argparse.ArgumentParser(
        prog="rtxconf",
        description="Load and inspect real-time water network monitoring configurations.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Global options
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress console output (logs only)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    load_parser = subparsers.add_parser(
        "load", help="Load a configuration and report diagnostics"
    )
    load_parser.add_argument(
        "config",
        nargs="?",
        default="config.yml",
        help="Configuration file path (default: config.yml)",
    )
    load_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with code 3 if any entity, reference, or binding was skipped",
    )
    load_parser.set_defaults(func=load_command)

    info_parser = subparsers.add_parser(
        "info", help="Show configuration sections and entity counts"
    )
    info_parser.add_argument(
        "config",
        nargs="?",
        default="config.yml",
        help="Configuration file path (default: config.yml)",
    )
    info_parser.set_defaults(func=info_command)

    graph_parser = subparsers.add_parser(
        "graph", help="Export the time-series dependency graph as JSON"
    )
    graph_parser.add_argument(
        "config",
        nargs="?",
        default="config.yml",
        help="Configuration file path (default: config.yml)",
    )
    graph_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output JSON file. Prints to stdout when omitted.",
    )
    graph_parser.set_defaults(func=graph_command)

    # Parse arguments and dispatch
    args = parser.parse_args()

    # Configure logging based on arguments
    import logging

    from rtxconf.log_config import set_global_log_level

    if args.verbose:
        log_level = logging.DEBUG
    else:
        log_level = logging.INFO

    set_global_log_level(log_level)

    # Suppress print output if --quiet is set
    if args.quiet:
        import builtins

        builtins.print = lambda *args, **kwargs: None

    if not hasattr(args, "func") or args.func is None:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
