# Public surface of the curation package.
from ._config import PlaylistConfig, parse_playlist_config
from ._errors import (
    ConsistencyFault,
    CredentialExpired,
    CriticalAuthFault,
    CurationError,
    RateLimited,
    RemoteCallError,
    ServerFault,
    TransientNetworkFault,
    UpstreamServiceFault,
    ValidationFault,
)
from ._retry import RetryPolicy, call_with_retries
from ._types import CatalogItem, SizeLimitPolicy, Suggestion
from .facade import Curator

__all__ = [
    "Curator",
    "PlaylistConfig",
    "parse_playlist_config",
    "CatalogItem",
    "Suggestion",
    "SizeLimitPolicy",
    "RetryPolicy",
    "call_with_retries",
    "CurationError",
    "ValidationFault",
    "RemoteCallError",
    "RateLimited",
    "ServerFault",
    "CredentialExpired",
    "TransientNetworkFault",
    "ConsistencyFault",
    "UpstreamServiceFault",
    "CriticalAuthFault",
]
