from .exceptions import CLIError
from .printer import EventPrinter, format_event

name = "cli"

__all__ = [
    "CLIError",
    "EventPrinter",
    "format_event",
]
