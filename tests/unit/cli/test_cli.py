import click
import pytest
from botocore.exceptions import NoCredentialsError
from click.testing import CliRunner

from stackshot import __version__, config
from stackshot.cli.stackshot import stackshot as cli
from stackshot.stack.errors import StackOperationError
from stackshot.stack.models import StackStatus
from stackshot.testing.cloudformation import client_error, make_event, no_updates_error

cli: click.Group


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def stack_file(tmp_path):
    path = tmp_path / "stack.yaml"
    path.write_text(
        "Name: my-stack\n"
        "TemplateURL: https://cfn-templates.s3.amazonaws.com/s3bucket.yaml\n"
        "Parameters:\n"
        "  BucketName: my-bucket\n"
        "Capabilities:\n"
        "  - CAPABILITY_IAM\n"
    )
    return str(path)


@pytest.fixture
def connected_api(cfn_api, monkeypatch):
    """Makes the CLI talk to the fake CloudFormation API, and records the connection arguments."""
    connect_calls = []

    def _connect(**kwargs):
        connect_calls.append(kwargs)
        return cfn_api

    monkeypatch.setattr("stackshot.cli.stackshot.connect_to_cloudformation", _connect)
    cfn_api.connect_calls = connect_calls
    return cfn_api


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert result.output.strip() == __version__


def test_help(runner):
    result = runner.invoke(cli, ["-h"])
    assert result.exit_code == 0
    assert "Usage: stackshot" in result.output
    assert "sync" in result.output


@pytest.mark.parametrize(
    "exception, expected_message",
    [
        (StackOperationError("DescribeStacks", "boom"), "DescribeStacks failed: boom"),
        (RuntimeError("unexpected"), "Error: unexpected"),
        (click.ClickException("example message"), "example message"),
    ],
)
def test_error_handling(runner, stack_file, monkeypatch, exception, expected_message):
    def _connect(**kwargs):
        raise exception

    monkeypatch.setattr("stackshot.cli.stackshot.connect_to_cloudformation", _connect)

    result = runner.invoke(cli, ["sync", stack_file])

    assert result.exit_code == 1
    assert expected_message in result.output


def test_missing_credentials_show_a_hint(runner, stack_file, connected_api):
    connected_api.add_state(NoCredentialsError())

    result = runner.invoke(cli, ["sync", stack_file])

    assert result.exit_code == 1
    assert "Error: DescribeStacks failed: Unable to locate credentials" in result.output
    assert "--aws-profile" in result.output


def test_aws_error_shows_error_code(runner, stack_file, connected_api):
    connected_api.add_state(client_error("DescribeStacks", "User is not authorized", code="AccessDenied"))

    result = runner.invoke(cli, ["sync", stack_file])

    assert result.exit_code == 1
    assert "Error: AWS error (AccessDenied) DescribeStacks failed" in result.output


class TestSync:
    def test_create(self, runner, stack_file, connected_api):
        connected_api.add_state(None)
        connected_api.add_state(
            StackStatus.CREATE_IN_PROGRESS,
            make_event("e1", "CREATE_IN_PROGRESS", "my-stack", "AWS::CloudFormation::Stack"),
        )
        connected_api.add_state(
            StackStatus.CREATE_COMPLETE,
            make_event("e2", "CREATE_COMPLETE", seconds=10),
            make_event("e3", "CREATE_COMPLETE", "my-stack", "AWS::CloudFormation::Stack", 11),
        )

        result = runner.invoke(
            cli, ["sync", stack_file, "--region", "eu-west-1", "--wait-delay", "0"]
        )

        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines[0] == "Creating stack my-stack"
        assert lines[1:4] == [
            "2024-01-01T12:00:00+00:00 my-stack(AWS::CloudFormation::Stack) CREATE_IN_PROGRESS",
            "2024-01-01T12:00:10+00:00 MyBucket(AWS::S3::Bucket) CREATE_COMPLETE",
            "2024-01-01T12:00:11+00:00 my-stack(AWS::CloudFormation::Stack) CREATE_COMPLETE",
        ]
        assert lines[4] == "Stack my-stack is CREATE_COMPLETE"
        assert connected_api.connect_calls == [
            {"region_name": "eu-west-1", "profile_name": None, "endpoint_url": None}
        ]
        (request,) = connected_api.calls_of("CreateStack")
        assert request["Parameters"] == [{"ParameterKey": "BucketName", "ParameterValue": "my-bucket"}]

    def test_update_without_changes(self, runner, stack_file, connected_api):
        connected_api.add_state(StackStatus.CREATE_COMPLETE)
        connected_api.update_error = no_updates_error()

        result = runner.invoke(cli, ["sync", stack_file])

        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["Updating stack my-stack", "No updates to be applied"]

    def test_failed_stack(self, runner, stack_file, connected_api):
        connected_api.add_state(None)
        connected_api.add_state(
            StackStatus.ROLLBACK_COMPLETE,
            make_event("e1", "CREATE_FAILED", reason="my-bucket already exists"),
        )

        result = runner.invoke(cli, ["sync", stack_file, "--wait-delay", "0"])

        assert result.exit_code == 1
        assert "MyBucket(AWS::S3::Bucket) CREATE_FAILED my-bucket already exists" in result.output
        assert "Error: stack failed to complete. status: ROLLBACK_COMPLETE" in result.output

    def test_timeout(self, runner, stack_file, connected_api):
        connected_api.add_state(None)
        connected_api.add_state(StackStatus.CREATE_IN_PROGRESS)
        connected_api.add_state(StackStatus.CREATE_IN_PROGRESS)

        result = runner.invoke(
            cli, ["sync", stack_file, "--wait-delay", "0", "--max-attempts", "2"]
        )

        assert result.exit_code == 1
        assert "Stack failed to complete in time (2 attempts)" in result.output

    def test_invalid_stack_file(self, runner, tmp_path, connected_api):
        path = tmp_path / "stack.yaml"
        path.write_text("Name: my-stack\n")

        result = runner.invoke(cli, ["sync", str(path)])

        assert result.exit_code == 1
        assert "Missing fields from document: template_url/template_body/template_path" in result.output
        assert connected_api.calls == []

    def test_missing_stack_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["sync", str(tmp_path / "missing.yaml")])
        assert result.exit_code == 2


def test_validate(runner, stack_file):
    result = runner.invoke(cli, ["validate", stack_file])

    assert result.exit_code == 0, result.output
    assert "name:         my-stack" in result.output
    assert "parameters:   1" in result.output
    assert "capabilities: CAPABILITY_IAM" in result.output
    assert "Stack configuration is valid" in result.output


def test_validate_invalid(runner, tmp_path):
    path = tmp_path / "stack.yaml"
    path.write_text(
        "Name: my-stack\n"
        "TemplateURL: https://cfn-templates.s3.amazonaws.com/s3bucket.yaml\n"
        "DisableRollback: true\n"
        "OnFailure: DELETE\n"
    )

    result = runner.invoke(cli, ["validate", str(path)])

    assert result.exit_code == 1
    assert "Error: disable_rollback and on_failure cannot both be set" in result.output


def test_config_show(runner, monkeypatch):
    monkeypatch.setattr(config, "WAIT_DELAY", 2.0)
    monkeypatch.setattr(config, "ENDPOINT_URL", None)

    result = runner.invoke(cli, ["config", "show"])

    assert result.exit_code == 0
    assert "WAIT_DELAY=2.0" in result.output.splitlines()
    assert "ENDPOINT_URL=" in result.output.splitlines()
