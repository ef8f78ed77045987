"""Tests for output formatting module."""

import io
import json

from rich.console import Console

from packsync_cli.cli.output import print_json, print_result, print_section, print_step, print_table


def make_console() -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, width=60, color_system=None), buffer


class TestPrintJson:
    """Test print_json function."""

    def test_output_is_valid_json(self) -> None:
        console, buffer = make_console()
        data = {"url": "https://github.com/acme/" + "x" * 100 + "/archive/main.zip", "n": 1}

        print_json(data, console_instance=console)

        assert json.loads(buffer.getvalue()) == data

    def test_non_serializable_values(self) -> None:
        from pathlib import Path

        console, buffer = make_console()
        print_json({"path": Path("/tmp/a")}, console_instance=console)
        assert json.loads(buffer.getvalue()) == {"path": "/tmp/a"}


class TestPrintTable:
    """Test print_table function."""

    def test_headers_and_rows(self) -> None:
        console, buffer = make_console()

        print_table(
            [{"repository": "acme/foo", "state": "present"}, {"repository": None, "state": "undeclared"}],
            ["repository", "state"],
            title="Plugins",
            console_instance=console,
        )

        output = buffer.getvalue()
        assert "Plugins" in output
        assert "Repository" in output
        assert "acme/foo" in output
        assert "undeclared" in output
        assert "None" not in output

    def test_values_are_escaped(self) -> None:
        console, buffer = make_console()
        print_table([{"name": "[bold]x[/bold]"}], ["name"], console_instance=console)
        assert "[bold]x[/bold]" in buffer.getvalue()


class TestPrintResult:
    """Test print_result function."""

    def test_success(self) -> None:
        console, buffer = make_console()
        print_result(True, "added: acme/foo@main", {"group": "start", "url": None}, console_instance=console)
        output = buffer.getvalue()
        assert "✓ added: acme/foo@main" in output
        assert "group: start" in output
        assert "url" not in output

    def test_failure(self) -> None:
        console, buffer = make_console()
        print_result(False, "removed: nothing", console_instance=console)
        assert "• removed: nothing" in buffer.getvalue()


class TestPrintStep:
    """Test print_step and print_section."""

    def test_step(self) -> None:
        console, buffer = make_console()
        print_step("installed to start", "foo", console_instance=console)
        assert buffer.getvalue() == "  installed to start: foo\n"

    def test_section(self) -> None:
        console, buffer = make_console()
        print_section("Syncing 2 plugins", console_instance=console)
        assert buffer.getvalue() == "Syncing 2 plugins\n"
