"""Tests for core/progress.py module.

Covers:
- _is_tty() function
- status() function
- progress() generator
- pluralize() function
- suppress_console_logs() context manager
- ConsoleSuppressingFilter class
"""

from __future__ import annotations

import logging
import sys
from io import StringIO
from unittest.mock import patch

import pytest

from rxmigrate.core.logging import ConsoleSuppressingFilter
from rxmigrate.core.progress import (
    _PROGRESS_THRESHOLD,
    _STYLES,
    _is_tty,
    get_console,
    is_console_suppressed,
    pluralize,
    progress,
    status,
    suppress_console_logs,
)


class TestIsTty:
    """Tests for _is_tty function."""

    def test_false_for_stringio(self) -> None:
        """Returns False for non-TTY stderr."""
        original = sys.stderr
        try:
            sys.stderr = StringIO()
            assert _is_tty() is False
        finally:
            sys.stderr = original


class TestStatus:
    """Tests for status function."""

    def test_prints_message(self) -> None:
        with patch("rxmigrate.core.progress._console") as mock_console:
            status("Cannot find any possible migrations")
            mock_console.print.assert_called_once()

    def test_success_style(self) -> None:
        """Applies success style."""
        with patch("rxmigrate.core.progress._console") as mock_console:
            status("Changed 2 files", style="success")
            call_args = mock_console.print.call_args[0][0]
            assert call_args.startswith(_STYLES["success"])
            assert "✓" in call_args

    def test_warning_style(self) -> None:
        with patch("rxmigrate.core.progress._console") as mock_console:
            status("3 findings", style="warning")
            assert "!" in mock_console.print.call_args[0][0]

    def test_with_indent(self) -> None:
        with patch("rxmigrate.core.progress._console") as mock_console:
            status("Indented", indent=4)
            assert "    " + _STYLES["info"] + "Indented" == mock_console.print.call_args[0][0]

    def test_console_writes_to_stderr(self) -> None:
        assert get_console().stderr is True


class TestProgress:
    """Tests for progress generator."""

    def test_yields_all_items(self) -> None:
        items = [1, 2, 3, 4, 5]
        assert list(progress(items)) == items

    def test_iterator_without_len(self) -> None:
        """Works on iterators; total is only a hint."""
        assert list(progress(iter([1, 2, 3]), desc="Indexing")) == [1, 2, 3]

    def test_large_list_without_tty_has_no_bar(self) -> None:
        items = list(range(_PROGRESS_THRESHOLD + 10))
        with (
            patch("rxmigrate.core.progress._is_tty", return_value=False),
            patch("rxmigrate.core.progress.Progress") as mock_progress,
        ):
            assert list(progress(items, desc="Migrating")) == items
        mock_progress.assert_not_called()

    def test_force_with_tty_shows_bar(self) -> None:
        with (
            patch("rxmigrate.core.progress._is_tty", return_value=True),
            patch("rxmigrate.core.progress.Progress") as mock_progress,
        ):
            pbar = mock_progress.return_value.__enter__.return_value
            assert list(progress([1, 2, 3], desc="Migrating", force=True)) == [1, 2, 3]
        assert pbar.advance.call_count == 3


class TestPluralize:
    @pytest.mark.parametrize(
        ("count", "expected"),
        [(0, "0 files"), (1, "1 file"), (2, "2 files")],
    )
    def test_default_plural(self, count: int, expected: str) -> None:
        assert pluralize(count, "file") == expected

    def test_custom_plural(self) -> None:
        assert pluralize(1, "fix", "fixes") == "1 fix"
        assert pluralize(3, "fix", "fixes") == "3 fixes"


class TestSuppressConsoleLogs:
    """Tests for suppress_console_logs context manager."""

    def test_sets_suppression_flag(self) -> None:
        assert not is_console_suppressed()
        with suppress_console_logs():
            assert is_console_suppressed()
        assert not is_console_suppressed()

    def test_clears_flag_on_exception(self) -> None:
        """Flag is cleared even on exception."""
        with pytest.raises(ValueError), suppress_console_logs():
            raise ValueError("test")
        assert not is_console_suppressed()


class TestConsoleSuppressingFilter:
    """Tests for ConsoleSuppressingFilter class."""

    def test_allows_logs_when_not_suppressed(self) -> None:
        filt = ConsoleSuppressingFilter()
        record = logging.LogRecord("test", logging.INFO, "test.py", 1, "test message", (), None)
        assert filt.filter(record) is True

    def test_blocks_logs_when_suppressed(self) -> None:
        filt = ConsoleSuppressingFilter()
        record = logging.LogRecord("test", logging.INFO, "test.py", 1, "test message", (), None)
        with suppress_console_logs():
            assert filt.filter(record) is False
