__all__ = [
    "AccessSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "Settings",
    "StorageSettings",
]


from .access import AccessSettings
from .logging import LoggingSettings
from .settings import Settings
from .storage import DatabaseSettings, StorageSettings
