from .supervisor_api import SupervisorApiConnector

__all__ = ["SupervisorApiConnector"]
