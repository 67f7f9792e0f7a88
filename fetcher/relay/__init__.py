from fetcher.relay.handler import RelayHandler
from fetcher.relay.header_profiles import HeaderProfile
from fetcher.relay.models import RelayRequest, RelayResponse

__all__ = ["RelayHandler", "HeaderProfile", "RelayRequest", "RelayResponse"]
