__all__ = [
    "BootConfiguration",
    "di",
    "QuizgateContainer",
    "LoggingProvider",
    "Settings",
    "TimestampProvider",
]


from . import di
from .config import Settings
from .container import BootConfiguration, QuizgateContainer
from .provider import LoggingProvider, TimestampProvider
