"""
The boundary to the CloudFormation service. The engine only needs four operations, which are described by the
``CloudFormationApi`` protocol so that tests can drive it with an in-memory double. ``BotoCloudFormationApi``
adapts a boto3 client to it.

Errors are reported the way botocore reports them, as ``botocore.exceptions.ClientError``.
"""
import logging
from typing import Optional, Protocol

from botocore.client import BaseClient

from stackshot.stack.models import (
    CreateStackInput,
    DescribeStackEventsOutput,
    DescribeStacksOutput,
    UpdateStackInput,
)

LOG = logging.getLogger(__name__)


class CloudFormationApi(Protocol):
    def describe_stacks(self, stack_name: str) -> DescribeStacksOutput:
        """Describes the stack with the given name or stack id."""
        ...

    def describe_stack_events(
        self, stack_name: str, next_token: Optional[str] = None
    ) -> DescribeStackEventsOutput:
        """Returns one page of stack events, most recent first, and the token of the next page if any."""
        ...

    def create_stack(self, request: CreateStackInput) -> dict:
        ...

    def update_stack(self, request: UpdateStackInput) -> dict:
        ...


class BotoCloudFormationApi:
    """A ``CloudFormationApi`` backed by a boto3 CloudFormation client."""

    client: BaseClient

    def __init__(self, client: BaseClient):
        self.client = client

    def describe_stacks(self, stack_name: str) -> DescribeStacksOutput:
        return self.client.describe_stacks(StackName=stack_name)

    def describe_stack_events(
        self, stack_name: str, next_token: Optional[str] = None
    ) -> DescribeStackEventsOutput:
        kwargs = {"StackName": stack_name}
        if next_token:
            kwargs["NextToken"] = next_token
        return self.client.describe_stack_events(**kwargs)

    def create_stack(self, request: CreateStackInput) -> dict:
        LOG.debug("Calling CreateStack for %s", request["StackName"])
        return self.client.create_stack(**request)

    def update_stack(self, request: UpdateStackInput) -> dict:
        LOG.debug("Calling UpdateStack for %s", request["StackName"])
        return self.client.update_stack(**request)
