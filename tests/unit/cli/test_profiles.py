import os
import sys

import pytest

from stackshot.cli.profiles import parse_profile_argument, set_profile_from_sys_argv


@pytest.mark.parametrize(
    "args, expected",
    [
        (["--profile=non-existing-test-profile"], "non-existing-test-profile"),
        (["--profile", "non-existing-test-profile"], "non-existing-test-profile"),
        (["stackshot", "--debug", "--profile=dev", "sync", "stack.yaml"], "dev"),
        (["stackshot", "--profile", "dev", "sync", "stack.yaml"], "dev"),
        (["stackshot", "sync", "stack.yaml"], None),
        (["stackshot", "--profile"], None),
        (["stackshot", "sync", "--", "--profile=dev"], None),
    ],
)
def test_parse_profile_argument(args, expected):
    assert parse_profile_argument(args) == expected


def test_set_profile_from_sys_argv(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["stackshot", "--profile=localstack", "sync", "stack.yaml"])
    monkeypatch.setenv("CONFIG_PROFILE", "")

    set_profile_from_sys_argv()

    assert os.environ["CONFIG_PROFILE"] == "localstack"
    # click parses the flag again, so it stays in place
    assert sys.argv == ["stackshot", "--profile=localstack", "sync", "stack.yaml"]


def test_set_profile_without_flag_keeps_environment(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["stackshot", "sync", "stack.yaml"])
    monkeypatch.setenv("CONFIG_PROFILE", "dev")

    set_profile_from_sys_argv()

    assert os.environ["CONFIG_PROFILE"] == "dev"
