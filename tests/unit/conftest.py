import pytest

from stackshot.testing.cloudformation import FakeCloudFormationApi
from stackshot.testing.config import (
    TEST_AWS_ACCESS_KEY_ID,
    TEST_AWS_REGION_NAME,
    TEST_AWS_SECRET_ACCESS_KEY,
)


@pytest.fixture(autouse=True)
def set_boto_test_credentials_and_region(monkeypatch):
    """
    Automatically sets the default credentials and region for all unit tests.
    """
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", TEST_AWS_ACCESS_KEY_ID)
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", TEST_AWS_SECRET_ACCESS_KEY)
    monkeypatch.setenv("AWS_DEFAULT_REGION", TEST_AWS_REGION_NAME)


@pytest.fixture
def cfn_api() -> FakeCloudFormationApi:
    return FakeCloudFormationApi(stack_name="my-stack")


@pytest.fixture
def collected_events():
    """A list of events, with an event consumer appending to it as ``collected_events.consume``."""

    class EventCollector(list):
        def consume(self, event):
            self.append(event)

    return EventCollector()
