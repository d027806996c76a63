"""
Input validation functions for vault_publish.

Checks directory settings before a sync run touches the file system.
Each validator returns ``(is_valid, error_message)``.
"""

from pathlib import Path

# ---------------------------------------------------------------------------
# Error message formatting helpers
# ---------------------------------------------------------------------------


def format_validation_error(field_name: str, reason: str) -> str:
    """
    Generate consistent error message for validation failures.

    Args:
        field_name: Human-readable field name (e.g., "Vault directory")
        reason: Description of validation failure (e.g., "does not exist")

    Returns:
        Formatted error message string
    """
    return f"{field_name} {reason}"


def validate_images_dir(name: str) -> tuple[bool, str]:
    """
    Validate the shared images directory name.

    Validation rules:
        - Cannot be empty or whitespace-only
        - Must be a single path segment (no separators, not '.' or '..')
    """
    if not name or not name.strip():
        return (
            False,
            format_validation_error("Images directory", "cannot be empty"),
        )
    if "/" in name or "\\" in name or name in (".", ".."):
        return (
            False,
            format_validation_error(
                "Images directory",
                f"must be a single directory name, got '{name}'",
            ),
        )
    return (True, "")


def validate_directory_layout(
    source: Path, destination: Path
) -> tuple[bool, str]:
    """
    Validate the vault and content directories.

    Validation rules:
        - The vault must exist and be a directory
        - The content directory must not be a file
        - Neither directory may contain the other (published notes would
          be rescanned as vault notes, or the vault would be pruned)
    """
    source = source.resolve()
    destination = destination.resolve()

    if not source.exists():
        return (
            False,
            format_validation_error(
                "Vault directory",
                f"does not exist: {source}. Set OBSIDIAN_DIR or pass --source.",
            ),
        )
    if not source.is_dir():
        return (
            False,
            format_validation_error(
                "Vault directory", f"is not a directory: {source}"
            ),
        )
    if destination.exists() and not destination.is_dir():
        return (
            False,
            format_validation_error(
                "Content directory", f"is not a directory: {destination}"
            ),
        )
    if destination == source:
        return (
            False,
            "Vault and content directory must be different",
        )
    if destination.is_relative_to(source):
        return (
            False,
            format_validation_error(
                "Content directory",
                f"must not be inside the vault: {destination}",
            ),
        )
    if source.is_relative_to(destination):
        return (
            False,
            format_validation_error(
                "Vault directory",
                f"must not be inside the content directory: {source}",
            ),
        )
    return (True, "")
