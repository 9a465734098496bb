import io
import re

from refile.cli_formatter import (
    DEFAULT_KV_WIDTH,
    DEFAULT_LINE_WIDTH,
    CLIFormatter,
    FormatterConfig,
    detect_terminal_capabilities,
)
from refile.models.runplan import (
    OUTCOME_FAILED,
    OUTCOME_MOVED,
    OUTCOME_PREVIEW,
    OUTCOME_SKIPPED,
    ActionOutcome,
    RunSummary,
)
from refile.skip_reasons import SKIP_REASON_CONTAINS_BASE


def _make_formatter(**config_overrides):
    config = FormatterConfig(**config_overrides)
    out = io.StringIO()
    err = io.StringIO()
    return CLIFormatter(config=config, stream=out, error_stream=err), out, err


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def test_colored_output_contains_ansi_sequences():
    formatter, out, _ = _make_formatter(use_color=True)
    formatter.success("Done.")
    value = out.getvalue()
    assert "\u001b[" in value
    assert _strip_ansi(value) == "Done.\n"


def test_plain_mode_has_no_ansi_sequences():
    formatter, out, err = _make_formatter(use_color=True, plain_mode=True)
    formatter.info("hello")
    formatter.error("bad")
    assert "\u001b[" not in out.getvalue()
    assert err.getvalue() == "bad\n"


def test_warnings_and_errors_go_to_error_stream():
    formatter, out, err = _make_formatter(use_color=False)
    formatter.line("plain")
    formatter.warning("careful")
    formatter.error("broken")
    assert out.getvalue() == "plain\n"
    assert err.getvalue() == "careful\nbroken\n"


def test_single_stream_receives_everything():
    stream = io.StringIO()
    formatter = CLIFormatter(FormatterConfig(use_color=False), stream=stream)
    formatter.line("a")
    formatter.warning("b")
    assert stream.getvalue() == "a\nb\n"


def test_verbose_only_when_enabled():
    quiet, out, _ = _make_formatter(use_color=False)
    quiet.verbose("hidden")
    assert out.getvalue() == ""

    loud, out, _ = _make_formatter(use_color=False, verbose=True)
    loud.verbose("shown")
    assert out.getvalue() == "[verbose] shown\n"


def test_kv_alignment():
    formatter, out, _ = _make_formatter(use_color=False)
    formatter.kv("Moved", "3")
    line = out.getvalue().rstrip("\n")
    assert line == "  " + "Moved".ljust(DEFAULT_KV_WIDTH) + " : 3"


def test_frame_ascii_width_and_wrapping():
    formatter, _, err = _make_formatter(use_color=False, unicode_enabled=False)
    formatter.frame("STOPPED", ["word " * 40], error=True)
    lines = err.getvalue().splitlines()
    assert lines[0].startswith("+- STOPPED ")
    assert all(len(line) == DEFAULT_LINE_WIDTH for line in lines)
    assert len(lines) > 3
    assert lines[-1] == "+" + "-" * (DEFAULT_LINE_WIDTH - 2) + "+"


def test_frame_unicode_borders():
    formatter, out, _ = _make_formatter(use_color=False, unicode_enabled=True)
    formatter.frame("NOTE", ["x"])
    lines = out.getvalue().splitlines()
    assert lines[0].startswith("┌─ NOTE ")
    assert lines[1].startswith("│ x")


def test_failure_summary_lists_reason_and_next_steps():
    formatter, _, err = _make_formatter(use_color=False, unicode_enabled=False)
    formatter.failure_summary(
        header="CONFIGURATION ERROR",
        reason="Bucket spec cannot be empty",
        remediation=["Fix the bucket definition."],
    )
    text = err.getvalue()
    assert "CONFIGURATION ERROR" in text
    assert "Reason: Bucket spec cannot be empty" in text
    assert "Next: Fix the bucket definition." in text


def test_outcome_routing():
    formatter, out, err = _make_formatter(use_color=False, verbose=True)
    formatter.outcome(ActionOutcome(status=OUTCOME_MOVED, path="/a", dst="/b/a"))
    formatter.outcome(ActionOutcome(status=OUTCOME_PREVIEW, path="/c", dst="/b/c"))
    formatter.outcome(ActionOutcome(status=OUTCOME_SKIPPED, path="/d", reason=SKIP_REASON_CONTAINS_BASE))
    formatter.outcome(ActionOutcome(status=OUTCOME_FAILED, path="/e", dst="/b/e", reason="disk full"))

    assert "Moved /a -> /b/a" in out.getvalue()
    assert "[dry-run] MOVE /c -> /b/c" in out.getvalue()
    assert "nest the bucket tree" in out.getvalue()
    assert "Skipping /d: contains the refile base folder" in err.getvalue()
    assert "Failed to move /e -> /b/e: disk full" in err.getvalue()


def test_summary_for_successful_and_failed_runs():
    formatter, out, err = _make_formatter(use_color=False, plain_mode=True)
    ok = RunSummary(
        dry_run=False,
        outcomes=[ActionOutcome(status=OUTCOME_MOVED, path="/a", dst="/b")],
        scanned_items=2,
        in_place=1,
    )
    formatter.summary(ok)
    text = out.getvalue()
    assert "> SUMMARY" in text
    assert "Moved" in text and ": 1" in text
    assert "Done." in text

    bad = RunSummary(
        dry_run=False,
        outcomes=[ActionOutcome(status=OUTCOME_FAILED, path="/a", dst="/b", reason="x")],
    )
    formatter.summary(bad)
    assert "Failed" in out.getvalue()
    assert "Finished with problems" in err.getvalue()


def test_dry_run_summary_wording():
    formatter, out, _ = _make_formatter(use_color=False, plain_mode=True)
    formatter.summary(
        RunSummary(dry_run=True, outcomes=[ActionOutcome(status=OUTCOME_PREVIEW, path="/a", dst="/b")])
    )
    text = out.getvalue()
    assert "DRY RUN SUMMARY" in text
    assert "Would move" in text
    assert "Preview only; nothing was moved." in text


def test_detect_terminal_capabilities_non_tty_is_plain(monkeypatch):
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("REFILE_PLAIN", raising=False)
    config = detect_terminal_capabilities(stdout_isatty=False)
    assert config.plain_mode
    assert not config.use_color


def test_detect_terminal_capabilities_env_overrides(monkeypatch):
    monkeypatch.delenv("REFILE_PLAIN", raising=False)
    monkeypatch.setenv("TERM", "xterm-256color")
    monkeypatch.setenv("NO_COLOR", "1")
    assert not detect_terminal_capabilities(stdout_isatty=True).use_color

    monkeypatch.delenv("NO_COLOR")
    assert detect_terminal_capabilities(stdout_isatty=True).use_color
    assert not detect_terminal_capabilities(stdout_isatty=True, no_color_flag=True).use_color

    monkeypatch.setenv("TERM", "dumb")
    dumb = detect_terminal_capabilities(stdout_isatty=True)
    assert not dumb.use_color
    assert not dumb.unicode_enabled

    monkeypatch.setenv("REFILE_PLAIN", "1")
    assert detect_terminal_capabilities(stdout_isatty=True).plain_mode


def test_detect_terminal_capabilities_keeps_verbose():
    assert detect_terminal_capabilities(plain_mode=True, verbose=True).verbose
