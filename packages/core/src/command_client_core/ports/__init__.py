from .service_client import IServiceClient
from .transport import ITransport

__all__ = [
    "IServiceClient",
    "ITransport",
]
