from datetime import datetime
from typing import IO, Optional

import click

from stackshot.stack.models import StackEvent


def format_event(event: StackEvent) -> str:
    """
    Formats a stack event as a single line, e.g.,
    ``2024-01-01T12:00:00+00:00 MyBucket(AWS::S3::Bucket) CREATE_COMPLETE``.
    """
    timestamp = event.get("Timestamp")
    if isinstance(timestamp, datetime):
        timestamp = timestamp.isoformat()

    line = "%s %s(%s) %s" % (
        timestamp or "",
        event.get("LogicalResourceId", ""),
        event.get("ResourceType", ""),
        event.get("ResourceStatus", ""),
    )
    reason = event.get("ResourceStatusReason")
    if reason:
        line = f"{line} {reason}"
    return line


def status_color(status: Optional[str]) -> Optional[str]:
    if not status:
        return None
    if status.endswith("_FAILED") or "ROLLBACK" in status:
        return "red"
    if status.endswith("_COMPLETE"):
        return "green"
    if status.endswith("_IN_PROGRESS"):
        return "yellow"
    return None


class EventPrinter:
    """Event consumer that prints every stack event as one line, colored by its status."""

    def __init__(self, file: IO = None, color: Optional[bool] = None):
        self.file = file
        self.color = color

    def __call__(self, event: StackEvent) -> None:
        click.secho(
            format_event(event),
            file=self.file,
            fg=status_color(event.get("ResourceStatus")),
            color=self.color,
        )
