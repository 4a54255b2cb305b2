"""Tools for formatting stackshot logs."""
import logging
from functools import lru_cache

MAX_THREAD_NAME_LEN = 12
MAX_NAME_LEN = 26

LOG_FORMAT = f"%(asctime)s.%(msecs)03d %(ss_level)5s --- [%(ss_thread){MAX_THREAD_NAME_LEN}s] %(ss_name)-{MAX_NAME_LEN}s : %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

CUSTOM_LEVEL_NAMES = {
    50: "FATAL",
    40: "ERROR",
    30: "WARN",
    20: "INFO",
    10: "DEBUG",
}


class DefaultFormatter(logging.Formatter):
    """
    A formatter that uses ``LOG_FORMAT`` and ``LOG_DATE_FORMAT``.
    """

    def __init__(self, fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT):
        super().__init__(fmt=fmt, datefmt=datefmt)


class AddFormattedAttributes(logging.Filter):
    """
    Filter that adds three attributes to a log record:

    - ss_level: the abbreviated loglevel that's max 5 characters long
    - ss_name: the abbreviated name of the logger (e.g., `s.stack.engine`), trimmed to ``MAX_NAME_LEN``
    - ss_thread: the abbreviated thread name (prefix trimmed, e.g., ``MainThread``)
    """

    max_name_len: int
    max_thread_len: int

    def __init__(self, max_name_len: int = None, max_thread_len: int = None):
        super().__init__()
        self.max_name_len = max_name_len if max_name_len else MAX_NAME_LEN
        self.max_thread_len = max_thread_len if max_thread_len else MAX_THREAD_NAME_LEN

    def filter(self, record):
        record.ss_level = CUSTOM_LEVEL_NAMES.get(record.levelno, record.levelname)
        record.ss_name = self._get_compressed_logger_name(record.name)
        record.ss_thread = record.threadName[-self.max_thread_len :]
        return True

    @lru_cache(maxsize=256)
    def _get_compressed_logger_name(self, name):
        return compress_logger_name(name, self.max_name_len)


def compress_logger_name(name: str, length: int) -> str:
    """
    Creates a short version of a logger name. For example ``stackshot.stack.engine`` with length=16 turns into
    ``s.stack.engine``. Parts are expanded from the right for as long as they fit.

    :param name: the logger name
    :param length: the max length of the logger name
    :return: the compressed name
    """
    if len(name) <= length:
        return name

    parts = name.split(".")
    # every part collapsed to one character plus the dots between them
    used = 2 * len(parts) - 1
    result = [part[0] for part in parts]

    for index in range(len(parts) - 1, -1, -1):
        part = parts[index]
        grown = used + len(part) - 1
        if grown > length:
            if index == len(parts) - 1:
                # not even the last part fits, show as much of it as the limit allows
                result[index] = part[: max(length - used + 1, 1)]
            break
        result[index] = part
        used = grown

    return ".".join(result)
