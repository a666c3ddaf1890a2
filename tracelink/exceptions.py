"""
Tracelink Exceptions

Errors raised by the observability layer itself. Failures of wrapped
operations are never converted into these; they propagate unchanged.
"""


class TracelinkError(Exception):
    """
    Base exception for tracelink errors.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(TracelinkError):
    """
    Invalid observability configuration (unknown log level, bad endpoint, ...).
    """

    def __init__(self, message: str, setting: str = None):
        super().__init__(message)
        self.setting = setting
