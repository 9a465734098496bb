"""
Module: cli_formatter
Purpose: Centralized CLI formatting utilities for refile output.
"""

from __future__ import annotations

import os
import sys
import textwrap
from dataclasses import dataclass
from typing import Iterable, TextIO

from .models.runplan import (
    OUTCOME_CREATED_DIR,
    OUTCOME_FAILED,
    OUTCOME_PARTIAL,
    OUTCOME_PREVIEW,
    OUTCOME_PREVIEW_DIR,
    OUTCOME_SKIPPED,
    MOVE_OUTCOMES,
    ActionOutcome,
    RunSummary,
)
from .skip_reasons import describe_skip_reason
from .utils import BOLD, color_256, color_text

DEFAULT_LINE_WIDTH = 96
DEFAULT_KV_WIDTH = 20
PRIMARY_INDENT = "  "
PALETTE = {
    "primary": 74,
    "accent": 141,
    "ok": 64,
    "warn": 221,
    "error": 160,
    "muted": 243,
}


@dataclass
class FormatterConfig:
    """
    Configuration options governing CLIFormatter output.
    """

    use_color: bool = True
    unicode_enabled: bool = True
    plain_mode: bool = False
    verbose: bool = False


class CLIFormatter:
    """
    Render refile CLI output. Warnings and errors go to ``error_stream``.
    """

    def __init__(
        self,
        config: FormatterConfig | None = None,
        stream: TextIO | None = None,
        error_stream: TextIO | None = None,
    ) -> None:
        self.config = config or FormatterConfig()
        self.stream = stream or sys.stdout
        self.error_stream = error_stream or (stream if stream is not None else sys.stderr)
        self.line_width = DEFAULT_LINE_WIDTH
        self.palette = {key: color_256(code) for key, code in PALETTE.items()}

    # ------------------------------------------------------------------- styles
    def line(self, text: str = "") -> None:
        """Print a plain line."""
        self._write(text)

    def blank(self) -> None:
        """Print an empty line."""
        self._write("")

    def section(self, title: str) -> None:
        """Print a section heading."""
        icon = "◆" if self.config.unicode_enabled and not self.config.plain_mode else ">"
        self.blank()
        self._write(self._style(f"{icon} {title}", self.palette["primary"], bold=True))

    def info(self, text: str) -> None:
        """Print informational text."""
        self._write(self._style(text, self.palette["primary"]))

    def success(self, text: str) -> None:
        """Print success text."""
        self._write(self._style(text, self.palette["ok"], bold=True))

    def warning(self, text: str) -> None:
        """Print warning text."""
        self._write(self._style(text, self.palette["warn"], bold=True), error=True)

    def error(self, text: str) -> None:
        """Print error text."""
        self._write(self._style(text, self.palette["error"], bold=True), error=True)

    def muted(self, text: str) -> None:
        """Print muted informational text."""
        self._write(self._style(text, self.palette["muted"]))

    def verbose(self, text: str) -> None:
        """Print verbose diagnostics when enabled."""
        if not self.config.verbose:
            return
        self.muted(f"[verbose] {text}")

    def kv(self, label: str, value: str, width: int = DEFAULT_KV_WIDTH) -> None:
        """Print an aligned key/value line."""
        self._write(f"{PRIMARY_INDENT}{label:<{width}} : {value}")

    def frame(self, title: str, lines: Iterable[str], *, error: bool = False) -> None:
        """
        Render a framed block with wrapped content.
        """
        width = self.line_width
        unicode = self.config.unicode_enabled and not self.config.plain_mode
        horiz = "─" if unicode else "-"
        vert = "│" if unicode else "|"
        tl, tr, bl, br = ("┌", "┐", "└", "┘") if unicode else ("+", "+", "+", "+")
        title_text = f"{horiz} {title} "
        self._write(f"{tl}{title_text}{horiz * max(0, width - 2 - len(title_text))}{tr}", error=error)
        content_width = width - 4
        for line in lines:
            for chunk in textwrap.wrap(line, width=content_width) or [""]:
                self._write(f"{vert} {chunk.ljust(content_width)} {vert}", error=error)
        self._write(f"{bl}{horiz * (width - 2)}{br}", error=error)

    def failure_summary(self, *, header: str, reason: str, remediation: list[str] | None = None) -> None:
        """
        Render a standardized failure/abort summary block.
        """
        lines = [f"Reason: {reason}"]
        for step in remediation or []:
            lines.append(f"Next: {step}")
        self.frame(header, lines, error=True)

    # ----------------------------------------------------------------- outcomes
    def outcome(self, outcome: ActionOutcome) -> None:
        """Print the status line for one executed action."""
        status = outcome.status
        if status == OUTCOME_SKIPPED:
            self.warning(outcome.message)
            self.verbose(describe_skip_reason(outcome.reason))
        elif status == OUTCOME_PARTIAL:
            self.warning(outcome.message)
        elif status == OUTCOME_FAILED:
            self.error(outcome.message)
        elif status in MOVE_OUTCOMES:
            self.line(outcome.message)
        elif status in (OUTCOME_PREVIEW, OUTCOME_PREVIEW_DIR):
            self.muted(outcome.message)
        elif status == OUTCOME_CREATED_DIR:
            self.info(outcome.message)
        else:
            self.line(outcome.message)

    def summary(self, summary: RunSummary) -> None:
        """Print the closing counts for a run."""
        self.section("DRY RUN SUMMARY" if summary.dry_run else "SUMMARY")
        self.kv("Items scanned", str(summary.scanned_items))
        self.kv("Already in place", str(summary.in_place))
        if summary.dry_run:
            self.kv("Would move", str(summary.previewed))
        else:
            self.kv("Moved", str(summary.moved))
        self.kv("Skipped", str(summary.skipped))
        if summary.partial:
            self.kv("Partial moves", str(summary.partial))
        if summary.failed:
            self.kv("Failed", str(summary.failed))
        if summary.ok:
            self.success("Done." if not summary.dry_run else "Preview only; nothing was moved.")
        else:
            self.error("Finished with problems; see the messages above.")

    # ----------------------------------------------------------------- internals
    def _write(self, text: str, *, error: bool = False) -> None:
        target = self.error_stream if error else self.stream
        target.write(text + "\n")

    def _style(self, text: str, color: str | None = None, bold: bool = False) -> str:
        if not self.config.use_color or self.config.plain_mode:
            return text
        prefix = ""
        if bold:
            prefix += BOLD
        if color:
            prefix += color
        if not prefix:
            return text
        return color_text(text, prefix)


def detect_terminal_capabilities(
    *,
    plain_mode: bool = False,
    no_color_flag: bool = False,
    verbose: bool = False,
    stdout_isatty: bool | None = None,
) -> FormatterConfig:
    """
    Determine formatter configuration based on environment cues.
    """
    if stdout_isatty is None:
        stdout_isatty = sys.stdout.isatty()

    env_no_color = bool(os.environ.get("NO_COLOR"))
    env_plain = bool(os.environ.get("REFILE_PLAIN"))
    term = os.environ.get("TERM", "").lower()

    if plain_mode or env_plain or not stdout_isatty:
        return FormatterConfig(
            use_color=False,
            unicode_enabled=False,
            plain_mode=True,
            verbose=verbose,
        )

    use_color = not no_color_flag and not env_no_color and term != "dumb"
    return FormatterConfig(
        use_color=use_color,
        unicode_enabled=term != "dumb" and _supports_unicode(),
        plain_mode=False,
        verbose=verbose,
    )


def _supports_unicode() -> bool:
    encoding = getattr(sys.stdout, "encoding", None)
    if not encoding:
        return False
    try:
        "┌".encode(encoding)
        return True
    except UnicodeEncodeError:
        return False
