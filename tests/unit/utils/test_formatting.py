"""Unit tests for console output helpers."""

from winctl.utils.formatting import (
    LABEL_WIDTH,
    console,
    err_console,
    format_label,
    print_detail,
    print_error,
    print_info,
)


class TestFormatLabel:
    """Tests for format_label function."""

    def test_pads_to_column_width(self) -> None:
        assert format_label("KEEP", "keep") == f"[keep]{'KEEP'.ljust(LABEL_WIDTH)}[/]"


class TestPrintHelpers:
    """Tests for the print helpers."""

    def test_info_keeps_brackets(self) -> None:
        """Bracketed text in a message is printed as-is."""
        with console.capture() as capture:
            print_info("[dry-run] No files were written.")

        assert "[dry-run] No files were written." in capture.get()

    def test_detail_is_indented(self) -> None:
        with console.capture() as capture:
            print_detail("Installed")

        output = capture.get()
        assert output.startswith(" " * (LABEL_WIDTH + 1))
        assert "Installed" in output

    def test_error_with_stray_closing_tag(self) -> None:
        """Exception text such as a TOML error never breaks the output."""
        with err_console.capture() as capture:
            print_error("Invalid TOML syntax near [/groups]")

        assert "Error: Invalid TOML syntax near [/groups]" in capture.get()
