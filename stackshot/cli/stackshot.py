import os
import traceback

import click
from botocore.exceptions import NoCredentialsError

from stackshot import __version__, config
from stackshot.aws.connect import connect_to_cloudformation
from stackshot.loader import load_stack_config
from stackshot.stack import Stack, StackOperationError, StackshotError, SyncResult
from stackshot.utils.sync import FixedDelayWaiter

from .exceptions import CLIError
from .printer import EventPrinter

CREDENTIALS_HINT = "Configure AWS credentials, e.g., with the AWS_PROFILE environment variable or --aws-profile"


class StackshotCliGroup(click.Group):
    """
    A Click group used for the top-level ``stackshot`` command group. It implements global exception handling by:

    - Ignoring click exceptions (already handled)
    - Turning stackshot and AWS errors into a short error message
    - Wrapping all unexpected exceptions in a ClickException (for a unified error message)
    """

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except click.exceptions.Exit:
            # raise Exit exceptions unmodified (e.g., raised on --help)
            raise
        except click.ClickException:
            # don't handle ClickExceptions, just reraise
            if ctx and ctx.params.get("debug"):
                click.echo(traceback.format_exc())
            raise
        except Exception as e:
            if ctx and ctx.params.get("debug"):
                click.echo(traceback.format_exc())

            if isinstance(e, StackOperationError) and isinstance(e.__cause__, NoCredentialsError):
                raise CLIError(e.message, hint=CREDENTIALS_HINT) from e
            elif isinstance(e, StackOperationError) and e.error_code:
                raise CLIError(f"AWS error ({e.error_code}) {e.message}") from e
            elif isinstance(e, StackshotError):
                raise CLIError(e.message) from e
            else:
                raise CLIError(str(e)) from e


def _setup_cli_logging(debug: bool):
    from stackshot.logging.setup import setup_logging_from_config

    if debug:
        config.DEBUG = True
        os.environ["DEBUG"] = "1"

    setup_logging_from_config()


@click.group(
    name="stackshot",
    cls=StackshotCliGroup,
    context_settings={"help_option_names": ["-h", "--help"]},
    help="Synchronize CloudFormation stacks with their YAML configuration",
)
@click.version_option(version=__version__, message="%(version)s")
@click.option("--debug", is_flag=True, help="Enable debug logging and print stack traces of errors")
@click.option("--profile", type=str, help="Set the configuration profile (~/.stackshot/<profile>.env)")
def stackshot(debug, profile):
    # --profile is read from sys.argv before the configuration is loaded, see main.py
    if debug or config.STACKSHOT_LOG:
        _setup_cli_logging(debug)


@stackshot.command(
    name="sync",
    help="Create or update the stack described by STACK_FILE and wait until CloudFormation is done",
)
@click.argument("stack_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--region", type=str, help="The AWS region of the stack")
@click.option("--aws-profile", type=str, help="The named AWS profile to take credentials from")
@click.option("--endpoint-url", type=str, help="A custom CloudFormation endpoint, e.g., LocalStack")
@click.option(
    "--wait-delay",
    type=click.FloatRange(min=0),
    help=f"Seconds to wait between two status checks (default: {config.WAIT_DELAY})",
)
@click.option(
    "--max-attempts",
    type=click.IntRange(min=1),
    help=f"Maximum number of status checks (default: {config.MAX_WAIT_ATTEMPTS})",
)
def cmd_sync(stack_file, region, aws_profile, endpoint_url, wait_delay, max_attempts):
    stack_config = load_stack_config(stack_file)
    api = connect_to_cloudformation(
        region_name=region, profile_name=aws_profile, endpoint_url=endpoint_url
    )
    waiter = FixedDelayWaiter(wait_delay) if wait_delay is not None else None

    stack = Stack.load(api, stack_config, waiter=waiter, max_attempts=max_attempts)
    click.echo(f"{'Updating' if stack.exists else 'Creating'} stack {stack_config.name}")

    result = stack.sync_and_poll_events(EventPrinter())
    if result is SyncResult.NO_UPDATES:
        click.echo("No updates to be applied")
        return

    click.secho(f"Stack {stack_config.name} is {stack.status}", fg="green")


@stackshot.command(name="validate", help="Validate the stack configuration in STACK_FILE")
@click.argument("stack_file", type=click.Path(exists=True, dir_okay=False))
def cmd_validate(stack_file):
    stack_config = load_stack_config(stack_file)

    template = stack_config.template_url or stack_config.template_path or "<inline template>"
    click.echo(f"name:         {stack_config.name}")
    click.echo(f"template:     {template}")
    click.echo(f"parameters:   {len(stack_config.parameters)}")
    click.echo(f"tags:         {len(stack_config.tags)}")
    click.echo(f"capabilities: {', '.join(stack_config.capabilities) or '-'}")
    click.secho("Stack configuration is valid", fg="green")


@stackshot.group(name="config", help="Inspect your stackshot configuration")
def stackshot_config():
    pass


@stackshot_config.command(name="show", help="Print the effective stackshot configuration")
def cmd_config_show():
    for key, value in config.collect_config_items():
        click.echo(f"{key}={'' if value is None else value}")
