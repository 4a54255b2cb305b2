import logging
from typing import Optional, Union

from botocore.exceptions import BotoCoreError, ClientError

from stackshot import config
from stackshot.stack.api import CloudFormationApi
from stackshot.stack.errors import (
    StackFailedError,
    StackOperationError,
    StackTimeoutError,
    no_stack_updates_to_perform,
    stack_does_not_exist,
)
from stackshot.stack.events import EventConsumer, StackEventTracker
from stackshot.stack.models import (
    TERMINAL_STATUSES,
    CreateStackInput,
    Parameters,
    Stack as CloudStack,
    StackConfig,
    SyncResult,
    Tags,
    UpdateStackInput,
)
from stackshot.utils.sync import FixedDelayWaiter, Waiter

LOG = logging.getLogger(__name__)


class Stack:
    """
    Synchronizes a ``StackConfig`` with the corresponding CloudFormation stack. Depending on whether a stack
    named ``StackConfig.name`` exists, ``sync()`` issues a CreateStack or an UpdateStack call.

    To also wait for CloudFormation to finish creating or updating the stack, call ``sync_and_poll_events()``,
    which passes the stack events to the given consumer in chronological order while waiting.

    Use ``Stack.load()`` to construct an instance, it fetches the current state of the stack and marks all
    existing events as seen. A ``Stack`` handles exactly one stack and is not thread-safe.
    """

    api: CloudFormationApi
    stack_config: StackConfig
    cloud_stack: Optional[CloudStack]
    events: StackEventTracker
    waiter: Waiter
    max_attempts: int

    def __init__(
        self,
        api: CloudFormationApi,
        stack_config: StackConfig,
        waiter: Waiter = None,
        max_attempts: int = None,
    ):
        stack_config.validate()

        if max_attempts is None:
            max_attempts = config.MAX_WAIT_ATTEMPTS
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        self.api = api
        self.stack_config = stack_config
        self.cloud_stack = None
        self.events = StackEventTracker(api, stack_config.name)
        self.waiter = waiter or FixedDelayWaiter(config.WAIT_DELAY)
        self.max_attempts = max_attempts

    @classmethod
    def load(
        cls,
        api: CloudFormationApi,
        stack_config: StackConfig,
        waiter: Waiter = None,
        max_attempts: int = None,
    ) -> "Stack":
        """
        Creates a ``Stack`` and loads the current state of the CloudFormation stack, if it exists.

        :raises InvalidStackConfigError: if the configuration is invalid, before any API call is made
        :raises StackOperationError: if loading the stack or its events fails
        """
        stack = cls(api, stack_config, waiter=waiter, max_attempts=max_attempts)
        stack.reload()
        if stack.exists:
            stack.events.prime_marker()
        return stack

    @property
    def exists(self) -> bool:
        return self.cloud_stack is not None

    @property
    def name(self) -> str:
        """The configured name of the stack if it exists in CloudFormation, an empty string otherwise."""
        if not self.exists:
            return ""
        return self.stack_config.name

    @property
    def stack_id(self) -> Optional[str]:
        if not self.exists:
            return None
        return self.cloud_stack.get("StackId")

    @property
    def status(self) -> Optional[str]:
        if not self.exists:
            return None
        return self.cloud_stack.get("StackStatus")

    def reload(self) -> None:
        """
        Fetches the current state of the stack. The stack is looked up by name until it was found once, and by its
        stack id afterwards. A stack that does not exist is not an error, it leaves the stack unloaded.

        :raises StackOperationError: if DescribeStacks fails for any other reason
        """
        identifier = self.stack_id or self.stack_config.name

        try:
            response = self.api.describe_stacks(identifier)
        except ClientError as e:
            if stack_does_not_exist(identifier, e):
                LOG.debug("Stack %s does not exist", identifier)
                self.cloud_stack = None
                return
            raise StackOperationError("DescribeStacks", str(e)) from e
        except BotoCoreError as e:
            raise StackOperationError("DescribeStacks", str(e)) from e

        stacks = response.get("Stacks") or []
        if len(stacks) != 1:
            raise StackOperationError(
                "DescribeStacks", f"Did not find correct number of stacks. Found: {len(stacks)}"
            )

        self.cloud_stack = stacks[0]
        self.events.set_stack_id(self.cloud_stack["StackId"])

    def sync(self) -> SyncResult:
        """
        Applies the stack configuration to CloudFormation: creates the stack if it does not exist, and updates it
        otherwise.

        :return: ``SyncResult.NO_UPDATES`` if CloudFormation reported that the stack already matches the
            configuration, ``CREATED`` or ``UPDATED`` otherwise
        :raises StackOperationError: if CloudFormation rejected the request
        """
        if not self.exists:
            self._create_stack()
            return SyncResult.CREATED

        return self._update_stack()

    def wait_until_done(self, consumer: EventConsumer) -> None:
        """
        Polls the stack until it reaches a terminal status, passing new stack events to the consumer on every
        poll. Waits between polls, but not after the last one.

        :raises StackFailedError: if the stack reached a terminal status that is not a success
        :raises StackTimeoutError: if no terminal status was reached within ``max_attempts`` polls
        :raises StackOperationError: if reloading the stack or its events fails
        """
        for attempt in range(1, self.max_attempts + 1):
            self.reload()

            # right after CreateStack, the stack may not be visible yet
            if self.exists:
                self.events.pull_new(consumer)

                status = self.status
                LOG.debug(
                    "Stack %s has status %s (attempt %d/%d)",
                    self.stack_config.name,
                    status,
                    attempt,
                    self.max_attempts,
                )
                if status in TERMINAL_STATUSES:
                    if not TERMINAL_STATUSES[status]:
                        raise StackFailedError(status)
                    return

            if attempt < self.max_attempts:
                self.waiter()

        raise StackTimeoutError(self.max_attempts)

    def sync_and_poll_events(self, consumer: EventConsumer) -> SyncResult:
        """
        Runs ``sync()`` and then waits for CloudFormation to finish, see ``wait_until_done()``. This call blocks
        until the stack reached a terminal status. If there was nothing to update, it returns right away.

        :param consumer: receives the stack events in chronological order
        :return: the result of ``sync()``
        """
        result = self.sync()
        if result is SyncResult.NO_UPDATES:
            LOG.debug("No updates to perform on stack %s", self.stack_config.name)
            return result

        self.wait_until_done(consumer)
        return result

    def _create_stack(self) -> None:
        request = self._create_stack_input()
        try:
            self.api.create_stack(request)
        except (ClientError, BotoCoreError) as e:
            raise StackOperationError("CreateStack", str(e)) from e

    def _update_stack(self) -> SyncResult:
        request = self._update_stack_input()
        try:
            self.api.update_stack(request)
        except ClientError as e:
            if no_stack_updates_to_perform(e):
                return SyncResult.NO_UPDATES
            raise StackOperationError("UpdateStack", str(e)) from e
        except BotoCoreError as e:
            raise StackOperationError("UpdateStack", str(e)) from e

        return SyncResult.UPDATED

    def _create_stack_input(self) -> CreateStackInput:
        stack_config = self.stack_config
        request = CreateStackInput(
            StackName=stack_config.name,
            EnableTerminationProtection=stack_config.enable_termination_protection,
        )
        self._set_template(request)

        # CloudFormation only accepts one of OnFailure and DisableRollback
        if stack_config.on_failure:
            request["OnFailure"] = stack_config.on_failure
        elif stack_config.disable_rollback:
            request["DisableRollback"] = True

        self._set_collections(request)
        return request

    def _update_stack_input(self) -> UpdateStackInput:
        request = UpdateStackInput(StackName=self.stack_config.name)
        self._set_template(request)
        self._set_collections(request)
        return request

    def _set_template(self, request: Union[CreateStackInput, UpdateStackInput]) -> None:
        if self.stack_config.template_body:
            request["TemplateBody"] = self.stack_config.template_body
        else:
            request["TemplateURL"] = self.stack_config.template_url

    def _set_collections(self, request: Union[CreateStackInput, UpdateStackInput]) -> None:
        # an empty list would tell CloudFormation to remove all values, so empty collections are left out
        stack_config = self.stack_config
        if stack_config.parameters:
            request["Parameters"] = to_parameters(stack_config.parameters)
        if stack_config.tags:
            request["Tags"] = to_tags(stack_config.tags)
        if stack_config.capabilities:
            request["Capabilities"] = list(stack_config.capabilities)


def to_parameters(parameters: dict) -> Parameters:
    return [
        {"ParameterKey": key, "ParameterValue": value} for key, value in parameters.items()
    ]


def to_tags(tags: dict) -> Tags:
    return [{"Key": key, "Value": value} for key, value in tags.items()]
