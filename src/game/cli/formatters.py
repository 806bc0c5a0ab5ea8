"""CLI output formatters for the Twenty Questions game.

This module provides consistent formatting for CLI output,
supporting both plain text and JSON output modes.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Protocol

from game.cli.commands import CommandResult


class OutputFormatter(Protocol):
    def format_result(self, result: CommandResult) -> str:
        ...

    def format_status(self, status: Dict[str, Any]) -> str:
        ...

    def format_statistics(self, stats: Dict[str, Any]) -> str:
        ...

    def format_config(self, config: Dict[str, Any]) -> str:
        ...

    def format_error(self, message: str, error: Optional[str] = None) -> str:
        ...


class TextFormatter:
    def format_result(self, result: CommandResult) -> str:
        if not result.success:
            return self.format_error(result.message, result.error)
        return result.message

    def format_status(self, status: Dict[str, Any]) -> str:
        lines = [
            f"\n{'='*50}",
            "Game Status",
            f"{'='*50}\n",
            f"Session ID: {status['session_id']}",
            f"Mode: {status['mode']}",
            f"Category: {status['category']} ({status['difficulty']})",
            f"Questions: {status['question_count']}/{status['max_questions']}",
            f"Hints: {status['hints_issued']}/{status['total_hints']}",
            f"Elapsed: {status['elapsed_seconds']}s",
        ]

        if status.get("paused"):
            lines.append("Paused: yes")
        if status.get("result"):
            lines.append(f"Result: {status['result']}")
        if status.get("word"):
            lines.append(f"Word: {status['word']}")

        return "\n".join(lines)

    def format_statistics(self, stats: Dict[str, Any]) -> str:
        aggregate = stats.get("aggregate", {})
        lines = [
            f"\n{'='*50}",
            "Statistics",
            f"{'='*50}\n",
            f"Games played: {aggregate.get('games_played', 0)}",
            f"Games won: {aggregate.get('games_won', 0)}",
            f"Win rate: {aggregate.get('win_rate', 0.0) * 100:.1f}%",
            f"Average questions: {aggregate.get('average_questions', 0)}",
            f"Best score: {aggregate.get('best_score')}",
        ]

        if aggregate.get("average_completion_seconds") is not None:
            lines.append(f"Average time: {aggregate['average_completion_seconds']}s")

        for title, key in (("By category", "by_category"), ("By difficulty", "by_difficulty")):
            breakdown = aggregate.get(key) or {}
            if not breakdown:
                continue
            lines.append(f"\n{title}:")
            for name, counts in sorted(breakdown.items()):
                lines.append(f"  {name}: {counts['won']}/{counts['played']} won")

        current = stats.get("current_session")
        if current:
            lines.append(
                f"\nCurrent game: {current['question_count']}/{current['max_questions']} questions, "
                f"{current['elapsed_seconds']}s elapsed"
            )

        return "\n".join(lines)

    def format_config(self, config: Dict[str, Any]) -> str:
        lines = [
            f"\n{'='*50}",
            "Configuration",
            f"{'='*50}\n",
            f"Config dir: {config['config_dir']}",
            f"Max questions: {config['max_questions']}",
            f"Hints per word: {config['hints_per_word']}",
            f"Default mode: {config['default_mode']}",
            f"Default difficulty: {config['default_difficulty']}",
            f"Questioner provider: {config['default_questioner']}",
            f"Answerer provider: {config['default_answerer']}",
            "",
            "Providers:",
        ]

        for name, provider in config.get("providers", {}).items():
            status = "configured" if provider["configured"] else "no credentials"
            lines.append(f"  {name}: {provider['transport']} / {provider['model']} ({status})")

        return "\n".join(lines)

    def format_error(self, message: str, error: Optional[str] = None) -> str:
        lines = [f"\nError: {message}"]
        if error:
            lines.append(f"Code: {error}")
        return "\n".join(lines)


class JsonFormatter:
    def format_result(self, result: CommandResult) -> str:
        return json.dumps({
            "success": result.success,
            "message": result.message,
            "data": result.data,
            "error": result.error,
        }, indent=2, default=str)

    def format_status(self, status: Dict[str, Any]) -> str:
        return json.dumps({"status": status}, indent=2, default=str)

    def format_statistics(self, stats: Dict[str, Any]) -> str:
        return json.dumps({"statistics": stats}, indent=2, default=str)

    def format_config(self, config: Dict[str, Any]) -> str:
        return json.dumps({"config": config}, indent=2, default=str)

    def format_error(self, message: str, error: Optional[str] = None) -> str:
        return json.dumps({
            "success": False,
            "message": message,
            "error": error,
        }, indent=2)


def get_formatter(json_mode: bool = False) -> OutputFormatter:
    return JsonFormatter() if json_mode else TextFormatter()
