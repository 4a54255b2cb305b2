import logging
import os
from typing import Any, List, Tuple, Union

from stackshot.constants import (
    CONFIG_DIR,
    DEFAULT_MAX_WAIT_ATTEMPTS,
    DEFAULT_WAIT_DELAY,
    LOG_LEVELS,
    TRACE_LOG_LEVELS,
    TRUE_STRINGS,
)


def eval_log_type(env_var_name: str) -> Union[str, bool]:
    """Get the log type from environment variable"""
    log_type = os.environ.get(env_var_name, "").lower().strip()
    return log_type if log_type in LOG_LEVELS else False


def is_env_true(env_var_name: str) -> bool:
    """Whether the given environment variable has a truthy value."""
    return os.environ.get(env_var_name, "").lower().strip() in TRUE_STRINGS


def parse_number_env(env_var_name: str, default: float, cast=float):
    """
    Parse the value of the given env variable as a number. Empty values fall back to the default, values that
    cannot be parsed raise a ValueError naming the variable.
    """
    value = os.environ.get(env_var_name, "").strip()
    if not value:
        return default
    try:
        return cast(value)
    except ValueError:
        raise ValueError(f"{env_var_name} must be a number, got {value!r}") from None


def load_environment(profiles: str = None, env=os.environ) -> List[str]:
    """Loads the environment variables from ~/.stackshot/{profile}.env, for each profile listed in the profiles.
    :param env: environment to load profile to. Defaults to `os.environ`
    :param profiles: a comma separated list of profiles to load (defaults to "default")
    :returns str: the list of the actually loaded profiles (might be the fallback)
    """
    if not profiles:
        profiles = "default"

    profiles = [profile.strip() for profile in profiles.split(",")]
    environment = {}
    import dotenv

    for profile in profiles:
        path = os.path.join(CONFIG_DIR, f"{profile}.env")
        if not os.path.exists(path):
            continue
        environment.update(dotenv.dotenv_values(path))

    for k, v in environment.items():
        # we do not want to override the environment
        if k not in env and v is not None:
            env[k] = v

    return profiles


# profiles are loaded before any other variable is read
LOADED_PROFILES = load_environment(os.environ.get("CONFIG_PROFILE"))

# enable debug logging
DEBUG = is_env_true("DEBUG")

# explicit log level, overrides DEBUG if set
STACKSHOT_LOG = eval_log_type("STACKSHOT_LOG")

# seconds to wait between two polls of the stack status
WAIT_DELAY = parse_number_env("STACKSHOT_WAIT_DELAY", DEFAULT_WAIT_DELAY)

# maximum number of polls before the engine gives up waiting for a terminal status
MAX_WAIT_ATTEMPTS = parse_number_env(
    "STACKSHOT_MAX_WAIT_ATTEMPTS", DEFAULT_MAX_WAIT_ATTEMPTS, cast=int
)

# custom CloudFormation endpoint, e.g., a LocalStack instance
ENDPOINT_URL = (
    os.environ.get("STACKSHOT_ENDPOINT_URL", "").strip()
    or os.environ.get("AWS_ENDPOINT_URL", "").strip()
    or None
)

# region and named AWS profile to use, boto3 resolves them from its own sources if unset
AWS_REGION = os.environ.get("STACKSHOT_REGION", "").strip() or None
AWS_PROFILE = os.environ.get("STACKSHOT_AWS_PROFILE", "").strip() or None


def is_trace_logging_enabled():
    if STACKSHOT_LOG:
        return str(STACKSHOT_LOG).lower() in TRACE_LOG_LEVELS
    return False


def collect_config_items() -> List[Tuple[str, Any]]:
    """Returns a list of key-value tuples of the effective stackshot configuration."""
    return [
        ("DEBUG", DEBUG),
        ("STACKSHOT_LOG", STACKSHOT_LOG),
        ("WAIT_DELAY", WAIT_DELAY),
        ("MAX_WAIT_ATTEMPTS", MAX_WAIT_ATTEMPTS),
        ("ENDPOINT_URL", ENDPOINT_URL),
        ("AWS_REGION", AWS_REGION),
        ("AWS_PROFILE", AWS_PROFILE),
        ("LOADED_PROFILES", LOADED_PROFILES),
    ]


# set log levels immediately, but will be overwritten later by setup_logging
if DEBUG:
    logging.getLogger("").setLevel(logging.DEBUG)
    logging.getLogger("stackshot").setLevel(logging.DEBUG)

LOG = logging.getLogger(__name__)
if is_trace_logging_enabled():
    LOG.debug("Loaded configuration profiles: %s", ", ".join(LOADED_PROFILES))
