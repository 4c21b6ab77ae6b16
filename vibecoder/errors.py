#!/usr/bin/env python3
"""
Error taxonomy for VibeCoder.

ConfigurationError aborts startup. Everything under LLMError is raised by the
protocol adapter or the response contracts and is caught by the tutoring
engine, which turns it into a friendly in-character message.
"""

from typing import Optional


class VibeCoderError(Exception):
    """Base class for all VibeCoder errors"""


class ConfigurationError(VibeCoderError):
    """Required configuration (the API credential) is missing or invalid"""


class LLMError(VibeCoderError):
    """A hosted-model call did not produce a usable result"""


class NetworkError(LLMError):
    """The request never got a response (DNS, connect, timeout, ...)"""


class ServiceError(LLMError):
    """The service answered with a non-success status"""

    def __init__(self, status: int, body: str = ''):
        self.status = status
        self.body = body
        super().__init__(f"Service returned HTTP {status}")


class EmptyResponseError(LLMError):
    """Success status, but the expected payload field is missing or empty"""


class DecodeError(LLMError):
    """Payload text does not parse into the expected contract"""

    def __init__(self, message: str, raw: Optional[str] = None):
        self.raw = raw
        super().__init__(message)


class LevelLockedError(VibeCoderError):
    """The previous level has not been completed yet"""

    def __init__(self, level_id: int):
        self.level_id = level_id
        super().__init__(f"Level {level_id} is locked")


class UnknownLevelError(VibeCoderError):
    """No level with the requested id exists in the curriculum"""

    def __init__(self, level_id: int):
        self.level_id = level_id
        super().__init__(f"No such level: {level_id}")
