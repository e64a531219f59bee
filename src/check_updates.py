#!/usr/bin/env python3
"""
Update Resolver - Update Check Script
Reads application descriptors produced by the scanner, resolves each one and
prints the decisions as JSON lines.
"""

import argparse
import json
import sys
import os

# Add src to path
src_dir = os.path.dirname(os.path.abspath(__file__))
if src_dir not in sys.path:
    sys.path.insert(0, src_dir)

from pathlib import Path
import logging

LOG_DIR = Path.home() / ".cache" / "update-resolver"

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Log to ~/.cache/update-resolver/check.log and stderr."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(LOG_DIR / "check.log"),
            logging.StreamHandler(sys.stderr),
        ]
    )


def load_descriptors(source) -> list:
    """Parse a JSON list of application records."""
    from core.models import ApplicationDescriptor

    data = json.load(source)
    if isinstance(data, dict):
        data = data.get("applications", [])
    if not isinstance(data, list):
        raise ValueError("expected a list of applications")
    return [ApplicationDescriptor.from_dict(item) for item in data]


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check tracked applications for newer versions.")
    parser.add_argument(
        "descriptors", nargs="?",
        help="JSON file with the applications to check (default: stdin)",
    )
    parser.add_argument("--config", type=Path, help="Resolver config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Resolve every descriptor and print one JSON decision per line."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    from core.config import DEFAULT_CONFIG_PATH
    from core.resolver import create_resolver

    try:
        if args.descriptors:
            with open(args.descriptors) as f:
                descriptors = load_descriptors(f)
        else:
            descriptors = load_descriptors(sys.stdin)
    except (OSError, ValueError, AttributeError) as e:
        logger.error(f"Could not read application list: {e}")
        return 1

    logger.info(f"Checking {len(descriptors)} applications for updates...")
    with create_resolver(args.config or DEFAULT_CONFIG_PATH) as resolver:
        decisions = resolver.resolve_all(descriptors)

    updates = 0
    for descriptor, decision in zip(descriptors, decisions):
        record = {"name": descriptor.name, "path": descriptor.path}
        record.update(decision.to_dict())
        print(json.dumps(record))
        if decision.has_update:
            updates += 1

    logger.info(f"Found {updates} updates available" if updates else "No updates available")
    return 0


if __name__ == "__main__":
    sys.exit(main())
