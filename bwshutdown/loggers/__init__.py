# bwshutdown loggers subpackage
from .event_logger import EventLogger

__all__ = ['EventLogger']
