"""Tests for progress indicators."""

import io

import pytest
from rich.console import Console

from packsync_cli.cli.progress import spinner


class TestSpinner:
    """Test spinner context manager."""

    def test_runs_block(self) -> None:
        console = Console(file=io.StringIO())
        ran = []

        with spinner("Working...", console_instance=console):
            ran.append(True)

        assert ran == [True]

    def test_disabled_writes_nothing(self) -> None:
        buffer = io.StringIO()
        console = Console(file=buffer)

        with spinner("Working...", enabled=False, console_instance=console):
            pass

        assert buffer.getvalue() == ""

    def test_exception_propagates(self) -> None:
        console = Console(file=io.StringIO())

        with pytest.raises(ValueError, match="boom"):
            with spinner("Working...", console_instance=console):
                raise ValueError("boom")
