from .scheduler import SchedulerSettings
from .server import ServerSettings

__all__ = ["SchedulerSettings", "ServerSettings"]
