"""
Creation of the boto3 clients stackshot talks to CloudFormation with.

Credentials are resolved by boto3 from its usual sources (environment, shared config files, instance metadata).
"""
import logging
from typing import Optional

from boto3.session import Session
from botocore.client import BaseClient
from botocore.config import Config

from stackshot import config as stackshot_config
from stackshot.constants import CLOUDFORMATION_SERVICE
from stackshot.stack.api import BotoCloudFormationApi

LOG = logging.getLogger(__name__)

# botocore retries throttled calls on its own, the engine never retries a failed call itself
DEFAULT_RETRIES = {"mode": "standard", "max_attempts": 5}


def default_client_config() -> Config:
    # botocore rewrites the retries of a config when it creates a client, so every client gets its own
    return Config(retries=dict(DEFAULT_RETRIES))


def create_cloudformation_client(
    region_name: Optional[str] = None,
    profile_name: Optional[str] = None,
    endpoint_url: Optional[str] = None,
    client_config: Optional[Config] = None,
) -> BaseClient:
    """
    Creates a boto3 CloudFormation client. Arguments that are not given fall back to the stackshot configuration
    and then to boto3's own defaults.

    :param region_name: the AWS region
    :param profile_name: the named AWS profile to take credentials from
    :param endpoint_url: a custom endpoint, e.g., the URL of a LocalStack instance
    :param client_config: the botocore config, defaults to ``default_client_config()``
    :return: the client
    """
    session = Session(
        region_name=region_name or stackshot_config.AWS_REGION,
        profile_name=profile_name or stackshot_config.AWS_PROFILE,
    )
    endpoint_url = endpoint_url or stackshot_config.ENDPOINT_URL
    if endpoint_url:
        LOG.debug("Using custom CloudFormation endpoint %s", endpoint_url)

    return session.client(
        CLOUDFORMATION_SERVICE,
        endpoint_url=endpoint_url,
        config=client_config or default_client_config(),
    )


def connect_to_cloudformation(
    region_name: Optional[str] = None,
    profile_name: Optional[str] = None,
    endpoint_url: Optional[str] = None,
) -> BotoCloudFormationApi:
    """Creates a ``BotoCloudFormationApi`` on top of a new CloudFormation client."""
    client = create_cloudformation_client(
        region_name=region_name, profile_name=profile_name, endpoint_url=endpoint_url
    )
    return BotoCloudFormationApi(client)
