"""
Shadow pool command line tools.

Create deposit notes and inspect commitment trees without a running dApp.

Usage::

    python -m shadow_pool commitment 0x0000000000000000000000000000000000000000 1000000000000000000
    python -m shadow_pool tree leaves.txt --index 3

Commands:
    commitment TOKEN AMOUNT   Print a fresh note ABI-encoded as (commitment, nullifier, secret)
    tree LEAVES_FILE          Print the root of the tree holding the leaves in LEAVES_FILE
                              (one 0x-prefixed field element per line), and with --index
                              the Merkle proof of that leaf as JSON
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from shadow_pool.subspecs.abi import encode_note
from shadow_pool.subspecs.bn254 import Fr
from shadow_pool.subspecs.commitment import CommitmentScheme
from shadow_pool.subspecs.merkle import IncrementalMerkleTree
from shadow_pool.subspecs.pool_config import TARGET_CONFIG
from shadow_pool.types import ShadowPoolError

logger = logging.getLogger(__name__)


class ColoredFormatter(logging.Formatter):
    """Logging formatter with ANSI colors for better readability."""

    # ANSI color codes
    GREY = "\x1b[38;5;244m"
    BLUE = "\x1b[38;5;39m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    BOLD_RED = "\x1b[38;5;196;1m"
    CYAN = "\x1b[38;5;51m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        timestamp = f"{self.CYAN}{self.formatTime(record, self.datefmt)}{self.RESET}"
        levelname = f"{color}{record.levelname:8}{self.RESET}"
        name = f"{self.BLUE}{record.name}{self.RESET}"
        return f"{timestamp} {levelname} {name}: {record.getMessage()}"


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Configure logging to stderr with optional colors."""
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler()
    handler.setLevel(level)

    if no_color:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = ColoredFormatter(datefmt="%Y-%m-%d %H:%M:%S")

    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def read_leaves(path: Path) -> list[Fr]:
    """
    Read a leaf log: one hex field element per line, blank lines ignored.

    Raises:
        ValueError: If a line is not a canonical field element.
    """
    leaves = []
    for lineno, line in enumerate(path.read_text().splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            leaves.append(Fr.from_hex(line))
        except ValueError as exc:
            raise ValueError(f"{path}:{lineno}: {exc}") from exc
    return leaves


def run_commitment(token: str, amount: str) -> str:
    """Create a fresh note and return its ABI encoding as hex."""
    note = CommitmentScheme().generate_deposit(token, amount)
    return "0x" + encode_note(note.commitment, note.nullifier, note.secret).hex()


def run_tree(leaves_file: Path, depth: int, index: int | None) -> dict[str, Any]:
    """Rebuild a tree from a leaf log and describe its root and, optionally, one proof."""
    leaves = read_leaves(leaves_file)
    tree = IncrementalMerkleTree.empty(depth)
    tree.insert_many(leaves)
    logger.info("Rebuilt depth-%d tree with %d leaves", depth, tree.leaf_count)

    output: dict[str, Any] = {"root": tree.root().to_hex(), "leafCount": tree.leaf_count}
    if index is not None:
        proof = tree.proof(index)
        output["proof"] = {
            "root": proof.root.to_hex(),
            "leaf": proof.leaf.to_hex(),
            "leafIndex": proof.leaf_index,
            "pathElements": [element.to_hex() for element in proof.path_elements],
            "pathIndices": proof.path_indices,
        }
    return output


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="shadow_pool",
        description="Shadow pool commitment and tree tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored logging output",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commitment = commands.add_parser("commitment", help="Generate a deposit note")
    commitment.add_argument("token", help="Token address, the zero address for native ETH")
    commitment.add_argument("amount", help="Amount in base units")

    tree = commands.add_parser("tree", help="Compute a root and Merkle proof from a leaf log")
    tree.add_argument("leaves_file", type=Path, help="File with one hex leaf per line")
    tree.add_argument("--index", type=int, default=None, help="Leaf to produce a proof for")
    tree.add_argument(
        "--depth",
        type=int,
        default=TARGET_CONFIG.TREE_DEPTH,
        help=f"Tree depth (default: {TARGET_CONFIG.TREE_DEPTH})",
    )

    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.no_color)

    try:
        if args.command == "commitment":
            print(run_commitment(args.token, args.amount))
        else:
            print(json.dumps(run_tree(args.leaves_file, args.depth, args.index), indent=2))
    except (ShadowPoolError, ValueError, OSError) as e:
        logger.error("%s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
