from .loader import load_config
from .schema import (
    DeliveryConfig,
    LoggingConfig,
    PathsConfig,
    RelayConfig,
    ServiceConfig,
    UploadConfig,
    UpstreamConfig,
)

__all__ = [
    "DeliveryConfig",
    "LoggingConfig",
    "PathsConfig",
    "RelayConfig",
    "ServiceConfig",
    "UploadConfig",
    "UpstreamConfig",
    "load_config",
]
