import os

# folder holding the user's configuration profiles
CONFIG_DIR = os.path.expanduser(os.path.join("~", ".stackshot"))

# default time (in seconds) to wait between two polls of a stack's status
DEFAULT_WAIT_DELAY = 5

# default number of polls before giving up on a stack reaching a terminal status (one hour at the default delay)
DEFAULT_MAX_WAIT_ATTEMPTS = 720

# name of the AWS service the engine talks to
CLOUDFORMATION_SERVICE = "cloudformation"

# error code CloudFormation uses for "not found" and "no updates" responses alike
VALIDATION_ERROR_CODE = "ValidationError"
NO_UPDATES_MESSAGE = "No updates are to be performed."
STACK_DOES_NOT_EXIST_FORMAT = "%s does not exist"

TRUE_STRINGS = ("1", "true", "True")

# log levels accepted by STACKSHOT_LOG
LOG_LEVELS = ("trace", "debug", "info", "warn", "error", "warning")
STACKSHOT_LOG_TRACE = "trace"
TRACE_LOG_LEVELS = [STACKSHOT_LOG_TRACE]
