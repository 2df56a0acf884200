#!/usr/bin/env python3
"""
Minez - Command Line Interface

CLI for inspecting seeded boards, RNG streams and deterministic autoplay.

Usage:
    python cli.py board --seed 12345 --level 3
    python cli.py board --seed 12345 --level 3 --reveal
    python cli.py rng --seed 12345 --count 20
    python cli.py autoplay --seed 12345 --levels 5
"""

import argparse
import json
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from packages.minez.content.levels import board_size_for_level
from packages.minez.game import run_headless
from packages.minez.generation.level import GenerationConfig, generate_level
from packages.minez.state.board import Board, TileKind, board_to_string
from packages.minez.state.rng import RNGStream, get_stream
from packages.minez.state.run import create_run


# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

def format_board_stats(board: Board) -> str:
    counts = []
    for kind in (TileKind.MINE, TileKind.ORE, TileKind.EXIT, TileKind.SHOP, TileKind.CHALLENGE):
        counts.append(f"{kind.value}={board.count(kind)}")
    return " ".join(counts)


def format_specials(board: Board) -> str:
    lines = []
    for tile in board.tiles:
        if tile.is_special:
            arrow = f" {tile.compass_dir.value}" if tile.compass_dir else ""
            lines.append(f"  ({tile.x}, {tile.y}) {tile.kind.value}: {tile.sub_id.value}{arrow}")
    return "\n".join(lines)


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_board(args) -> int:
    """Generate and display one level's board."""
    run = create_run(args.seed)
    run.level = args.level
    for challenge in args.challenge or []:
        run.add_challenge(challenge)
    size = args.size or board_size_for_level(args.level)
    config = GenerationConfig(use_level_specs=args.level_specs)
    board = generate_level(run, size, size, config)

    if args.json:
        print(json.dumps({
            "seed": args.seed,
            "level": args.level,
            "width": board.width,
            "height": board.height,
            "rows": board_to_string(board, reveal_all=True).split("\n"),
            "specials": [
                {"x": t.x, "y": t.y, "kind": t.kind.value, "id": t.sub_id.value}
                for t in board.tiles if t.is_special
            ],
        }, indent=2))
        return 0

    print(f"Seed: {args.seed}  Level: {args.level}  Size: {size}x{size}")
    print(format_board_stats(board))
    print()
    print(board_to_string(board, reveal_all=args.reveal))
    specials = format_specials(board)
    if specials:
        print("\nSpecial tiles:")
        print(specials)
    return 0


def cmd_rng(args) -> int:
    """Display stream values for verification."""
    streams = {
        "level": get_stream(RNGStream.LEVEL, args.seed, args.level),
        "mathematician": get_stream(RNGStream.MATHEMATICIAN, args.seed, args.level),
        "shop": get_stream(RNGStream.SHOP, args.seed, args.level),
        "challenge": get_stream(RNGStream.CHALLENGE, args.seed, args.level),
    }
    values = {name: [rng.random() for _ in range(args.count)] for name, rng in streams.items()}

    if args.json:
        print(json.dumps(values, indent=2))
        return 0

    print(f"Seed: {args.seed}  Level: {args.level}")
    for name, seq in values.items():
        print(f"\n{name}:")
        for i, val in enumerate(seq):
            print(f"  {i}: {val:.10f}")
    return 0


def cmd_autoplay(args) -> int:
    """Run the deterministic bot and print per-level summaries."""
    result = run_headless(args.seed, levels=args.levels, verbose=not args.json)
    if args.json:
        print(json.dumps({
            "seed": result.seed,
            "victory": result.victory,
            "level_reached": result.level_reached,
            "lives": result.lives,
            "gold": result.gold,
            "stats": result.stats,
        }, indent=2))
        return 0

    print("\n=== Run Statistics ===")
    for key, value in result.stats.items():
        print(f"  {key}: {value}")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Minez - CLI for inspecting the engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s board --seed 12345 --level 3
  %(prog)s board --seed 12345 --level 3 --challenge MathTest --reveal
  %(prog)s rng --seed 12345 --count 20
  %(prog)s autoplay --seed 12345 --levels 5
        """
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Board command
    board_parser = subparsers.add_parser("board", help="Generate and display a board")
    board_parser.add_argument("--seed", "-s", type=int, required=True, help="Run seed")
    board_parser.add_argument("--level", "-l", type=int, default=1, help="Level number")
    board_parser.add_argument("--size", type=int, help="Override board side length")
    board_parser.add_argument("--challenge", "-c", action="append", help="Drafted challenge id (repeatable)")
    board_parser.add_argument("--level-specs", action="store_true", help="Use the fixed per-level table")
    board_parser.add_argument("--reveal", "-r", action="store_true", help="Show every tile")
    board_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    # RNG command
    rng_parser = subparsers.add_parser("rng", help="Show RNG stream values")
    rng_parser.add_argument("--seed", "-s", type=int, required=True, help="Run seed")
    rng_parser.add_argument("--level", "-l", type=int, default=1, help="Level number")
    rng_parser.add_argument("--count", "-n", type=int, default=10, help="Number of values to show")
    rng_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    # Autoplay command
    autoplay_parser = subparsers.add_parser("autoplay", help="Play levels with the deterministic bot")
    autoplay_parser.add_argument("--seed", "-s", type=int, required=True, help="Run seed")
    autoplay_parser.add_argument("--levels", "-n", type=int, default=16, help="Maximum levels to play")
    autoplay_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    # Dispatch to command handler
    commands = {
        "board": cmd_board,
        "rng": cmd_rng,
        "autoplay": cmd_autoplay,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
