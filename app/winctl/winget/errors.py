"""Winget exit codes.

Winget reports failures as HRESULT-style exit codes. On Windows these
arrive as negative signed 32-bit integers (e.g. -1978335212), so codes
are normalized to their unsigned form before lookup.
"""

UNKNOWN_ERROR = "Unknown Error"

NO_APPLICATIONS_FOUND = 0x8A150014
UPDATE_NOT_APPLICABLE = 0x8A15002B
PACKAGE_ALREADY_INSTALLED = 0x8A150061

WINGET_ERROR_CODES: dict[int, str] = {
    0x8A150001: "Internal Error",
    0x8A150002: "Invalid command line arguments",
    0x8A150003: "Executing command failed",
    0x8A150004: "Opening manifest failed",
    0x8A150005: "Cancellation signal received",
    0x8A150006: "Running ShellExecute failed",
    0x8A150007: "Cannot process manifest. The manifest version is higher than supported",
    0x8A150008: "Downloading installer failed",
    0x8A150009: "Cannot write to index; it is a higher schema version",
    0x8A15000A: "The index is corrupt",
    0x8A15000B: "The configured source information is corrupt",
    0x8A15000C: "The source name is already configured",
    0x8A15000D: "The source type is invalid",
    0x8A15000E: "The MSIX file is a bundle, not a package",
    0x8A15000F: "Data required by the source is missing",
    0x8A150010: "None of the installers are applicable for the current system",
    0x8A150011: "The installer file's hash does not match the manifest",
    0x8A150012: "The source name does not exist",
    0x8A150013: "The source location is already configured under another name",
    NO_APPLICATIONS_FOUND: "No packages found",
    0x8A150015: "No sources are configured",
    0x8A150016: "Multiple packages found matching the criteria",
    0x8A150017: "No manifest found matching the criteria",
    0x8A150019: "Command requires administrator privileges to run",
    0x8A15001A: "Source requires a secure connection",
    0x8A15001B: "Microsoft Store client is blocked by policy",
    0x8A15001C: "Microsoft Store app is blocked by policy",
    0x8A15001E: "Failed to install the Microsoft Store app",
    UPDATE_NOT_APPLICABLE: "No applicable update found",
    0x8A15002C: "Upgrade all completed with failures",
    0x8A15002D: "Installer failed security check",
    PACKAGE_ALREADY_INSTALLED: "Package is already installed",
    0x8A150101: "Application is currently running",
    0x8A150102: "Another installation is already in progress",
    0x8A150103: "One or more files are being used",
    0x8A150104: "The package has a dependency missing from your system",
    0x8A150105: "There is no more space on your PC",
    0x8A150106: "There is not enough memory available to install",
    0x8A150107: "This application requires internet connectivity",
    0x8A150108: "The application encountered an error during installation",
    0x8A150109: "Restart your PC to finish installation",
    0x8A15010A: "Installation failed. Restart your PC and try again",
    0x8A15010B: "Your PC will restart to finish installation",
    0x8A15010C: "Installation was cancelled",
    0x8A15010D: "Another version of this application is already installed",
    0x8A15010E: "A higher version of this application is already installed",
    0x8A15010F: "Installation is blocked by organization policy",
    0x8A150110: "Failed to install package dependencies",
    0x8A150111: "Application is currently in use by another application",
    0x8A150112: "Invalid parameter",
    0x8A150113: "Package is not supported by the system",
    0x8A150114: "The installer does not support upgrading an existing package",
}


def normalize_exit_code(code: int) -> int:
    """Convert a signed 32-bit exit code to its unsigned HRESULT form."""
    return code & 0xFFFFFFFF


def describe_exit_code(code: int) -> str:
    """Map a winget exit code to a human-readable reason.

    Args:
        code: Process exit code, signed or unsigned.

    Returns:
        The known reason, or "Unknown Error" for codes not in the table.
    """
    return WINGET_ERROR_CODES.get(normalize_exit_code(code), UNKNOWN_ERROR)


def format_exit_code(code: int) -> str:
    """Format an exit code with its hex form and reason, e.g. '0x8A150014 (No packages found)'."""
    return f"0x{normalize_exit_code(code):08X} ({describe_exit_code(code)})"


def is_no_applications_found(code: int) -> bool:
    """Check if an exit code means the query matched nothing."""
    return normalize_exit_code(code) == NO_APPLICATIONS_FOUND
