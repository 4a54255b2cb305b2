import os
import sys
from typing import List, Optional

# runs before ``stackshot.config`` is imported, so it must not import anything from stackshot


def set_profile_from_sys_argv():
    """
    Looks for ``--profile`` in sys.argv and exports its value as ``CONFIG_PROFILE``, which ``stackshot.config``
    reads when it is first imported. The argument itself is left in place for click.
    """
    profile = parse_profile_argument(sys.argv)
    if profile:
        os.environ["CONFIG_PROFILE"] = profile.strip()


def parse_profile_argument(args: List[str]) -> Optional[str]:
    """
    Returns the value of ``--profile <profile>`` or ``--profile=<profile>`` in the given arguments, or None.
    Arguments after ``--`` are not options and are ignored.
    """
    remaining = iter(args)
    for arg in remaining:
        if arg == "--":
            break
        name, separator, value = arg.partition("=")
        if name != "--profile":
            continue
        if separator:
            return value
        return next(remaining, None)

    return None
