from typing import Optional

from botocore.exceptions import ClientError

from stackshot.constants import (
    NO_UPDATES_MESSAGE,
    STACK_DOES_NOT_EXIST_FORMAT,
    VALIDATION_ERROR_CODE,
)


class StackshotError(Exception):
    """Base class of all errors raised by stackshot."""

    message: str

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidStackConfigError(StackshotError):
    """The stack configuration is incomplete or contains settings that cannot be combined."""


class StackOperationError(StackshotError):
    """
    A CloudFormation API call failed. ``operation`` names the API operation and the original exception is
    available as ``__cause__``.
    """

    operation: str

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation

    @property
    def error_code(self) -> Optional[str]:
        """The AWS error code of the underlying ``ClientError``, if any."""
        if isinstance(self.__cause__, ClientError):
            return get_error_code(self.__cause__)
        return None


class StackFailedError(StackshotError):
    """The stack reached a terminal status that does not represent success."""

    status: str

    def __init__(self, status: str):
        super().__init__(f"stack failed to complete. status: {status}")
        self.status = status


class StackTimeoutError(StackshotError):
    """The stack did not reach a terminal status within the configured number of polls."""

    attempts: int

    def __init__(self, attempts: int):
        super().__init__(
            f"Stack failed to complete in time ({attempts} attempts). "
            "Check your stack status in CloudFormation."
        )
        self.attempts = attempts


def get_error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


def get_error_message(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Message", "")


def no_stack_updates_to_perform(error: ClientError) -> bool:
    """
    Whether an UpdateStack error only means that the stack already matches the submitted configuration.

    CloudFormation has no dedicated error code for this case, it responds with a ``ValidationError`` carrying a
    specific message.
    """
    return (
        get_error_code(error) == VALIDATION_ERROR_CODE
        and get_error_message(error) == NO_UPDATES_MESSAGE
    )


def stack_does_not_exist(stack_name: str, error: ClientError) -> bool:
    """
    Whether a DescribeStacks error means that the stack with the given name or id does not exist.

    Like for updates, CloudFormation reports a missing stack as a ``ValidationError`` with a specific message.
    """
    return get_error_code(error) == VALIDATION_ERROR_CODE and (
        STACK_DOES_NOT_EXIST_FORMAT % stack_name
    ) in get_error_message(error)
