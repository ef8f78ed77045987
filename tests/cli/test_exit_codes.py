"""Tests for exit codes module."""

from packsync_cli.cli.exit_codes import ExitCode


class TestExitCode:
    """Test ExitCode class."""

    def test_values(self) -> None:
        assert ExitCode.SUCCESS == 0
        assert ExitCode.GENERAL_ERROR == 1
        assert ExitCode.CANCELLED == 130

    def test_get_name(self) -> None:
        assert ExitCode.get_name(0) == "SUCCESS"
        assert ExitCode.get_name(1) == "GENERAL_ERROR"
        assert ExitCode.get_name(130) == "CANCELLED"
        assert ExitCode.get_name(42) == "UNKNOWN(42)"

    def test_get_description(self) -> None:
        assert "successfully" in ExitCode.get_description(0)
        assert "cancelled" in ExitCode.get_description(130)
        assert "Unknown" in ExitCode.get_description(99)
