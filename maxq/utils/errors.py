# maxq/utils/errors.py


class MaxQError(Exception):
    """Base class for errors raised by the render queue."""


class StorageError(MaxQError):
    """The settings file could not be read or written."""


class LaunchError(MaxQError):
    """A render job could not be started."""


class RendererNotFoundError(LaunchError):
    def __init__(self, message: str = "3ds Max path not found. Please set it in Preferences."):
        super().__init__(message)


class QueueLocked(MaxQError):
    def __init__(self, action: str = "modify the queue"):
        super().__init__(f"Cannot {action} while rendering is in progress.")
        self.action = action
