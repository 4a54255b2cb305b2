import logging
import sys

from stackshot import config, constants

from .format import AddFormattedAttributes, DefaultFormatter

# log levels of third-party modules, applied after the root log level

default_log_levels = {
    "boto3": logging.INFO,
    "botocore": logging.ERROR,
    "s3transfer": logging.INFO,
    "urllib3": logging.WARNING,
}

trace_log_levels = {
    "boto3": logging.DEBUG,
    "botocore": logging.DEBUG,
    "stackshot.stack.events": logging.DEBUG,
}


def get_log_level_from_config():
    # overriding the log level if STACKSHOT_LOG has been set
    if config.STACKSHOT_LOG:
        log_level = str(config.STACKSHOT_LOG).upper()
        if log_level.lower() in constants.TRACE_LOG_LEVELS:
            log_level = "DEBUG"
        if log_level == "WARN":
            log_level = "WARNING"
        return logging.getLevelName(log_level)

    return logging.DEBUG if config.DEBUG else logging.WARNING


def setup_logging_from_config():
    log_level = get_log_level_from_config()
    setup_logging(log_level)

    if config.is_trace_logging_enabled():
        for name, level in trace_log_levels.items():
            logging.getLogger(name).setLevel(level)


def create_default_handler(log_level: int):
    log_handler = logging.StreamHandler(stream=sys.stderr)
    log_handler.setLevel(log_level)
    log_handler.setFormatter(DefaultFormatter())
    log_handler.addFilter(AddFormattedAttributes())
    return log_handler


def setup_logging(log_level=logging.INFO) -> None:
    """
    Configures the python logging environment for stackshot.

    :param log_level: the optional log level.
    """
    log_handler = create_default_handler(log_level)

    # replace any existing handlers
    logging.basicConfig(level=log_level, handlers=[log_handler], force=True)

    # route warnings (e.g., botocore deprecations) through logging instead of printing them
    logging.captureWarnings(True)

    logging.root.setLevel(log_level)
    logging.getLogger("stackshot").setLevel(log_level)
    for logger, level in default_log_levels.items():
        logging.getLogger(logger).setLevel(level)
