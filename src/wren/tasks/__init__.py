"""Background work spawned off the request path."""

from wren.tasks.scheduler import BackgroundTaskScheduler, PendingTask

__all__ = ["BackgroundTaskScheduler", "PendingTask"]
