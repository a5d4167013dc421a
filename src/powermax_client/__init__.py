"""HTTP transport for the PowerMax management REST API."""
from .client import PowerMaxClient
from .config import ClientOptions
from .context import RequestContext
from .exceptions import HTTPError, PowerMaxError
from .types import HeaderProvider, Payload, RawStream

__all__ = [
    "PowerMaxClient",
    "ClientOptions",
    "RequestContext",
    "PowerMaxError",
    "HTTPError",
    "HeaderProvider",
    "Payload",
    "RawStream",
]
