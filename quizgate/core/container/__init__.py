__all__ = [
    "BootConfiguration",
    "QuizgateContainer",
    "StorageContainer",
]

from .quizgate import BootConfiguration, QuizgateContainer
from .storage import StorageContainer
