import logging
from typing import Callable, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from stackshot.stack.api import CloudFormationApi
from stackshot.stack.errors import StackOperationError
from stackshot.stack.models import DescribeStackEventsOutput, StackEvent

LOG = logging.getLogger(__name__)

EventConsumer = Callable[[StackEvent], None]
"""
Receives the events of a stack in chronological order. Exceptions raised by a consumer abort the polling and are
propagated to the caller unchanged.
"""


class StackEventTracker:
    """
    Tracks the events of a single stack, so that every call of ``pull_new`` only hands out the events that
    happened since the previous call.

    CloudFormation lists events most recent first. The tracker remembers the id of the most recent event it has
    handed out (``last_event_id``) and stops paging once it reaches that event again.
    """

    api: CloudFormationApi
    stack_name: str
    stack_id: Optional[str]
    last_event_id: Optional[str]

    def __init__(self, api: CloudFormationApi, stack_name: str):
        self.api = api
        self.stack_name = stack_name
        self.stack_id = None
        self.last_event_id = None

    def set_stack_id(self, stack_id: str) -> None:
        self.stack_id = stack_id

    @property
    def target(self) -> str:
        """The stack id once it is known, the stack name otherwise."""
        return self.stack_id or self.stack_name

    def prime_marker(self) -> None:
        """
        Marks the most recent event of the stack as seen, so that only events that happen afterwards are handed
        out. Does nothing for a stack that has not been resolved yet or has no events.
        """
        if not self.stack_id:
            return

        events = self._describe_page(None).get("StackEvents") or []
        if not events:
            return

        self.last_event_id = events[0]["EventId"]
        LOG.debug("Last seen event of stack %s is %s", self.stack_name, self.last_event_id)

    def pull_new(self, consumer: EventConsumer) -> int:
        """
        Passes all events that happened since the last pull to the consumer, oldest first.

        If loading any page fails, nothing is passed to the consumer and the marker stays where it was.

        :param consumer: the event consumer
        :return: the number of events passed to the consumer
        """
        new_events = self._load_new_events()

        # new_events is most recent first, consumers get them in chronological order
        for event in reversed(new_events):
            consumer(event)
            self.last_event_id = event["EventId"]

        if new_events:
            LOG.debug("Passed %d new events of stack %s", len(new_events), self.stack_name)

        return len(new_events)

    def _load_new_events(self) -> List[StackEvent]:
        new_events = []
        next_token = None

        while True:
            page = self._describe_page(next_token)

            for event in page.get("StackEvents") or []:
                if self.last_event_id is not None and event["EventId"] == self.last_event_id:
                    return new_events
                new_events.append(event)

            next_token = page.get("NextToken")
            if not next_token:
                return new_events

    def _describe_page(self, next_token: Optional[str]) -> DescribeStackEventsOutput:
        try:
            return self.api.describe_stack_events(self.target, next_token)
        except (ClientError, BotoCoreError) as e:
            raise StackOperationError("DescribeStackEvents", str(e)) from e
