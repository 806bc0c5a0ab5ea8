"""Main entry point for the Twenty Questions CLI.

Usage:
    python -m game.cli.main play [--difficulty easy] [--category animal]
    python -m game.cli.main watch [--speed fast]
    python -m game.cli.main stats
    python -m game.cli.main config
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

src_path = str(Path(__file__).parent.parent.parent)
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from game.cli.app import GameCLIApp
from game.cli.commands import get_statistics, play_game, show_config, watch_game
from game.cli.formatters import JsonFormatter, TextFormatter, get_formatter
from game.domain.entities import Category, Difficulty


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _add_word_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--difficulty", "-d",
        choices=[d.value for d in Difficulty],
        help="Word difficulty (default from game.yaml)",
    )
    parser.add_argument(
        "--category", "-c",
        choices=[c.value for c in Category],
        help="Word category (default: random)",
    )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="twenty-questions",
        description="Twenty Questions CLI - Play 20 Questions against an LLM, or watch two LLMs play",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output results in JSON format",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Reveal the secret word when a game starts",
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        help="Directory containing game.yaml, models.yaml and agents.yaml",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    play_parser = subparsers.add_parser(
        "play",
        help="Ask the questions yourself (human-asks mode)",
    )
    _add_word_options(play_parser)

    watch_parser = subparsers.add_parser(
        "watch",
        help="Watch an LLM question another LLM (llm-asks mode)",
    )
    _add_word_options(watch_parser)
    watch_parser.add_argument(
        "--speed",
        choices=["normal", "fast", "very_fast"],
        default="normal",
        help="Delay between auto-play turns (default: normal)",
    )

    subparsers.add_parser(
        "stats",
        help="Show aggregate statistics over finished games",
    )

    subparsers.add_parser(
        "config",
        help="Show the effective configuration",
    )

    return parser


class InteractiveCLI:
    def __init__(self, app: GameCLIApp, formatter: TextFormatter | JsonFormatter):
        self._app = app
        self._formatter = formatter

    def get_input(self) -> str:
        return input("\nYou: ").strip()

    def show_output(self, message: str) -> None:
        print(f"\n{message}")

    async def run_play(self, difficulty: str | None, category: str | None) -> int:
        result = await play_game(
            self._app,
            self.get_input,
            self.show_output,
            difficulty=difficulty,
            category=category,
        )
        if not result.success:
            print(self._formatter.format_result(result))
        else:
            self.show_output("Thanks for playing!")
        return 0 if result.success else 1

    async def run_watch(
        self,
        difficulty: str | None,
        category: str | None,
        speed: str,
    ) -> int:
        result = await watch_game(
            self._app,
            self.show_output,
            difficulty=difficulty,
            category=category,
            speed=speed,
        )
        print(self._formatter.format_result(result))
        return 0 if result.success else 1

    async def run_stats(self) -> int:
        result = get_statistics(self._app)
        print(self._formatter.format_statistics(result.data or {}))
        return 0

    async def run_config(self) -> int:
        result = show_config(self._app)
        print(self._formatter.format_config(result.data or {}))
        return 0


async def async_main(args: argparse.Namespace) -> int:
    formatter = get_formatter(args.json)
    app = GameCLIApp(config_dir=args.config_dir, debug=args.debug or None)
    cli = InteractiveCLI(app, formatter)

    try:
        if args.command == "play":
            return await cli.run_play(args.difficulty, args.category)

        elif args.command == "watch":
            return await cli.run_watch(args.difficulty, args.category, args.speed)

        elif args.command == "stats":
            return await cli.run_stats()

        elif args.command == "config":
            return await cli.run_config()

        else:
            return 1

    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130
    finally:
        await app.close()


def main() -> int:
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(args.verbose)
    return asyncio.run(async_main(args))


if __name__ == "__main__":
    sys.exit(main())
