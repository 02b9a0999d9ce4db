"""Exceptions raised while preparing a head model."""


class HeadModelError(Exception):
    """Base class for head model preparation errors."""


class ConfigurationError(HeadModelError, ValueError):
    """A required option is missing or the geometry does not suit the method."""


class UnsupportedMethodError(HeadModelError, ValueError):
    """The requested forward method is not one of the supported methods."""

    def __init__(self, method, supported=()):
        self.method = method
        self.supported = tuple(supported)
        msg = f'unsupported method "{method}"'
        if self.supported:
            msg += f" (supported: {', '.join(self.supported)})"
        super().__init__(msg)
