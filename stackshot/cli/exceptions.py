from typing import Optional

import click


class CLIError(click.ClickException):
    """A ClickException with a red error message, optionally followed by a hint on how to fix the problem."""

    hint: Optional[str]

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.hint = hint

    def format_message(self) -> str:
        message = click.style(self.message, fg="red")
        if self.hint:
            message = f"{message}\n{self.hint}"
        return message
