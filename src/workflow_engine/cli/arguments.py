"""Argument parser for the workflow-engine CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Dict

from workflow_engine.config.models import VALID_ENGINES


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than zero: {value}")
    return number


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value}")
    return number


def _add_artifact_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--artifact-dir",
        metavar="DIR",
        help="Directory for pipeline artifacts (default: test/.artifacts).",
    )
    parser.add_argument(
        "--image-tarball",
        metavar="PATH",
        help="Saved image tarball to generate the SBOM from.",
    )
    parser.add_argument(
        "--sbom-filename",
        metavar="NAME",
        help="SBOM filename inside the artifact directory.",
    )
    parser.add_argument(
        "--grype-filename",
        metavar="NAME",
        help="Grype report filename inside the artifact directory.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workflow-engine",
        description="workflow-engine - run security and build CI pipelines.",
    )

    # Global options
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show workflow-engine version and exit.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (info-level) logging.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce logging output to errors only.",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        type=Path,
        help="Path to config file (default: .workflow-engine.yml in the current directory).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Log the commands each pipeline would run without running them.",
    )
    parser.add_argument(
        "--timeout",
        metavar="SECONDS",
        type=_positive_float,
        help="Kill every running command once the pipeline exceeds this deadline.",
    )
    parser.add_argument(
        "--max-workers",
        metavar="N",
        type=_positive_int,
        help="Maximum concurrent steps per stage.",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    debug = subparsers.add_parser(
        "debug",
        help="Print tool versions and build an SBOM of the test image.",
        description="Print tool versions and build an SBOM of the test image.",
    )
    _add_artifact_arguments(debug)

    image_scan = subparsers.add_parser(
        "image-scan",
        help="Generate an SBOM for an image tarball and scan it with grype.",
        description="Generate an SBOM for an image tarball and scan it with grype.",
    )
    _add_artifact_arguments(image_scan)

    smoke = subparsers.add_parser(
        "smoke-test",
        help="Run the engine inside its container image and report diagnostics.",
        description="Run the engine inside its container image and report diagnostics.",
    )
    smoke.add_argument(
        "--engine",
        choices=sorted(VALID_ENGINES),
        help="Container engine to use (default: docker).",
    )
    smoke.add_argument(
        "--image",
        metavar="IMAGE",
        help="Image to run (default: workflow-engine:latest).",
    )

    return parser


def cli_args_to_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Convert CLI arguments to config override dict.

    Only options given explicitly on the command line are included, so
    config file values survive when a flag is omitted.

    Args:
        args: Parsed CLI arguments.

    Returns:
        Dictionary of config overrides.
    """
    overrides: Dict[str, Any] = {}

    if getattr(args, "dry_run", None):
        overrides["dry_run"] = True
    if getattr(args, "timeout", None) is not None:
        overrides["timeout"] = args.timeout
    if getattr(args, "max_workers", None) is not None:
        overrides["pipeline"] = {"max_workers": args.max_workers}

    artifacts: Dict[str, Any] = {}
    for arg_name, key in (
        ("artifact_dir", "directory"),
        ("image_tarball", "image_tarball"),
        ("sbom_filename", "sbom_filename"),
        ("grype_filename", "grype_filename"),
    ):
        value = getattr(args, arg_name, None)
        if value is not None:
            artifacts[key] = value
    if artifacts:
        overrides["artifacts"] = artifacts

    smoke: Dict[str, Any] = {}
    if getattr(args, "engine", None) is not None:
        smoke["engine"] = args.engine
    if getattr(args, "image", None) is not None:
        smoke["image"] = args.image
    if smoke:
        overrides["smoke"] = smoke

    return overrides
