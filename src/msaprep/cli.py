"""Command-line interface for msaprep.

Provides CLI commands for:
- Running the search and the full alignment pipeline for a query
- Post-processing an existing search alignment
- Writing a configuration template
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import yaml
from pydantic import ValidationError

from msaprep.config import Config
from msaprep.exceptions import ConfigurationError, MSAPrepError
from msaprep.pipeline.pipeline import AlignmentPipeline
from msaprep.storage.serialization import read_alignment, write_alignment_atomic


def setup_logging(verbose: bool = False) -> None:
    """Set up logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def load_config(path: Optional[str]) -> Config:
    """Build the configuration once, from YAML if a path is given."""
    try:
        if path:
            return Config.from_yaml(path)
        return Config()
    except (OSError, yaml.YAMLError, ValidationError) as e:
        raise ConfigurationError(f"Invalid configuration {path or '(environment)'}: {e}") from e


def read_query(value: str) -> Tuple[str, str]:
    """Read a query given as a FASTA file or a literal sequence.

    Returns:
        (name, sequence)
    """
    path = Path(value)
    if path.exists():
        name = path.stem
        parts = []
        with open(path) as f:
            for line in f:
                line = line.strip()
                if line.startswith(">"):
                    if parts:
                        break
                    if line[1:].split():
                        name = line[1:].split()[0]
                    continue
                parts.append(line)
        return name, "".join(parts)
    return "query", value.strip()


def cmd_run(args: argparse.Namespace) -> int:
    """Search, build and filter the alignment for a query."""
    setup_logging(args.verbose)
    logger = logging.getLogger("msaprep.cli")

    try:
        config = load_config(args.config)
    except MSAPrepError as e:
        logger.error("%s", e)
        return 1
    if args.checkpoints:
        config.output.checkpoint_dir = Path(args.checkpoints)
    if args.profile:
        config.output.build_profile = True
    if args.no_query_only:
        config.output.allow_query_only = False

    name, sequence = read_query(args.query)
    name = args.name or name
    logger.info("Running %s (%d residues)", name, len(sequence))

    pipeline = AlignmentPipeline(config)
    try:
        result = pipeline.run(sequence, name, args.output, database=args.database)
    except MSAPrepError as e:
        logger.error("%s", e)
        return 1

    logger.info(
        "Wrote %d sequences x %d columns to %s",
        len(result.records),
        result.stats.final_width,
        result.alignment_path,
    )
    if result.stats.redundancy_fallback:
        logger.warning("Redundancy filter removed too much; unfiltered alignment kept")
    return 0


def cmd_process(args: argparse.Namespace) -> int:
    """Post-process an existing search alignment."""
    setup_logging(args.verbose)
    logger = logging.getLogger("msaprep.cli")

    try:
        config = load_config(args.config)
    except MSAPrepError as e:
        logger.error("%s", e)
        return 1
    if args.checkpoints:
        config.output.checkpoint_dir = Path(args.checkpoints)

    _, sequence = read_query(args.query)
    try:
        records = read_alignment(args.alignment)
    except (OSError, MSAPrepError) as e:
        logger.error("Cannot read %s: %s", args.alignment, e)
        return 1
    if not records:
        logger.error("No records in %s", args.alignment)
        return 1

    try:
        pipeline = AlignmentPipeline(config)
        records = pipeline.process(sequence, records, reference_database=args.reference)
        write_alignment_atomic(records, args.output, config.output.line_width)
    except MSAPrepError as e:
        logger.error("%s", e)
        return 1

    logger.info("Wrote %d sequences to %s", len(records), args.output)
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    """Write the default configuration as YAML."""
    Config().to_yaml(args.output)
    print(f"Configuration template written to {args.output}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="msaprep",
        description="msaprep - alignment preparation for profile-based structure prediction",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        help="Path to configuration file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Run command
    run_parser = subparsers.add_parser(
        "run",
        help="Search and build the alignment for a query",
    )
    run_parser.add_argument(
        "query",
        help="Query FASTA file or sequence",
    )
    run_parser.add_argument(
        "-o", "--output",
        default=".",
        help="Output directory",
    )
    run_parser.add_argument(
        "-n", "--name",
        help="Basename for output files (defaults to the FASTA id)",
    )
    run_parser.add_argument(
        "-d", "--database",
        help="Search database name from the configuration",
    )
    run_parser.add_argument(
        "--checkpoints",
        help="Directory for per-stage checkpoint alignments",
    )
    run_parser.add_argument(
        "--profile",
        action="store_true",
        help="Build a PSSM from the final alignment",
    )
    run_parser.add_argument(
        "--no-query-only",
        action="store_true",
        help="Fail instead of continuing when the search finds no hits",
    )
    run_parser.set_defaults(func=cmd_run)

    # Process command
    proc_parser = subparsers.add_parser(
        "process",
        help="Post-process an existing search alignment",
    )
    proc_parser.add_argument(
        "query",
        help="Full query FASTA file or sequence",
    )
    proc_parser.add_argument(
        "alignment",
        help="Search alignment (query copy first, .gz allowed)",
    )
    proc_parser.add_argument(
        "-o", "--output",
        required=True,
        help="Output alignment path",
    )
    proc_parser.add_argument(
        "-r", "--reference",
        help="Unfiltered BLAST database for unmasking",
    )
    proc_parser.add_argument(
        "--checkpoints",
        help="Directory for per-stage checkpoint alignments",
    )
    proc_parser.set_defaults(func=cmd_process)

    # Config command
    cfg_parser = subparsers.add_parser(
        "config",
        help="Write a configuration template",
    )
    cfg_parser.add_argument(
        "-o", "--output",
        default="msaprep.yaml",
        help="Output YAML path",
    )
    cfg_parser.set_defaults(func=cmd_config)

    # Parse arguments
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
