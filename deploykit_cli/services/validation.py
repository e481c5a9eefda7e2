"""Field checks for the account and hostname answers.

Each check raises ``ValidationError`` instead of returning a boolean so the
prompt layer can show the reason next to the input.
"""

from __future__ import annotations

from deploykit_cli.daemon.exceptions import ValidationError


def _require(field: str, value: str) -> None:
    if not value:
        raise ValidationError(field, "a value is required")


def validate_full_name(value: str) -> None:
    _require("full name", value)
    # ':' is the passwd(5) field separator
    if ":" in value:
        raise ValidationError("full name", "name may not contain ':'")


def validate_username(value: str) -> None:
    _require("username", value)
    for char in value:
        if not (char.isascii() and (char.islower() or char.isdigit())):
            raise ValidationError(
                "username", f"username may not contain special characters: {char}"
            )


def validate_password(value: str) -> None:
    _require("password", value)


def validate_hostname(value: str) -> None:
    _require("hostname", value)
    for char in value:
        if not (char.isascii() and char.isalnum()):
            raise ValidationError(
                "hostname", f"hostname may not contain special characters: {char}"
            )


def default_username(full_name: str) -> str:
    """Suggest a username: the ASCII letters and digits of the name, lower-cased."""
    return "".join(
        char.lower() for char in full_name if char.isascii() and char.isalnum()
    )
