from .api import BotoCloudFormationApi, CloudFormationApi
from .engine import Stack
from .errors import (
    InvalidStackConfigError,
    StackFailedError,
    StackOperationError,
    StackshotError,
    StackTimeoutError,
)
from .events import EventConsumer, StackEventTracker
from .models import TERMINAL_STATUSES, StackConfig, StackStatus, SyncResult

__all__ = [
    "BotoCloudFormationApi",
    "CloudFormationApi",
    "EventConsumer",
    "InvalidStackConfigError",
    "Stack",
    "StackConfig",
    "StackEventTracker",
    "StackFailedError",
    "StackOperationError",
    "StackStatus",
    "StackTimeoutError",
    "StackshotError",
    "SyncResult",
    "TERMINAL_STATUSES",
]
