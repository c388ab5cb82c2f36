from .server import create_app
from .upstream import RelayReply, UpstreamRelay

__all__ = ["RelayReply", "UpstreamRelay", "create_app"]
