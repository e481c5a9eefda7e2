"""Interactive prompts.

``Prompter`` is what the install session talks to; ``InquirerPrompter``
renders it in the terminal with InquirerPy.
"""

from __future__ import annotations

from typing import Callable, Protocol, Sequence, TypeVar

from InquirerPy import inquirer
from InquirerPy.base.control import Choice
from prompt_toolkit.validation import ValidationError as PromptValidationError
from prompt_toolkit.validation import Validator

from deploykit_cli.daemon.exceptions import ValidationError

T = TypeVar("T")

Check = Callable[[str], None]


class Prompter(Protocol):
    def confirm(self, message: str, default: bool = False) -> bool:
        ...

    def select(
        self, message: str, choices: Sequence[tuple[str, T]], searchable: bool = False
    ) -> T:
        ...

    def text(self, message: str, default: str = "", check: Check | None = None) -> str:
        ...

    def password(self, message: str, check: Check | None = None) -> str:
        ...


class FieldValidator(Validator):
    """Adapts a ValidationError-raising check to prompt_toolkit."""

    def __init__(self, check: Check) -> None:
        self.check = check

    def validate(self, document) -> None:
        try:
            self.check(document.text)
        except ValidationError as error:
            raise PromptValidationError(
                message=error.reason, cursor_position=len(document.text)
            ) from error


class InquirerPrompter:
    """Terminal prompts backed by InquirerPy."""

    def confirm(self, message: str, default: bool = False) -> bool:
        return inquirer.confirm(message=message, default=default).execute()

    def select(
        self, message: str, choices: Sequence[tuple[str, T]], searchable: bool = False
    ) -> T:
        options = [Choice(value=value, name=label) for label, value in choices]
        if searchable:
            return inquirer.fuzzy(message=message, choices=options).execute()
        return inquirer.select(message=message, choices=options).execute()

    def text(self, message: str, default: str = "", check: Check | None = None) -> str:
        return inquirer.text(
            message=message,
            default=default,
            validate=FieldValidator(check) if check else None,
        ).execute()

    def password(self, message: str, check: Check | None = None) -> str:
        return inquirer.secret(
            message=message,
            validate=FieldValidator(check) if check else None,
        ).execute()
