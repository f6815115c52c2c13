"""bim-fetch - async HTTP client with content negotiation and status validation."""

from bim_fetch.body import encode_body
from bim_fetch.client import FetchClient
from bim_fetch.config_loader import ConfigError, load_client_config, load_clients_file
from bim_fetch.decoding import decode_response
from bim_fetch.errors import ClientError, DecodeError, ErrorKind, StatusError
from bim_fetch.models import (
    ClientConfig,
    FormData,
    FormFile,
    RequestMode,
    RequestOptions,
    UrlSearchParams,
)
from bim_fetch.status import validate_status
from bim_fetch.transport import HttpxTransport, Transport
from bim_fetch.urls import encode_query, resolve_url

__version__ = "0.1.0"

__all__ = [
    "ClientConfig",
    "ClientError",
    "ConfigError",
    "DecodeError",
    "ErrorKind",
    "FetchClient",
    "FormData",
    "FormFile",
    "HttpxTransport",
    "RequestMode",
    "RequestOptions",
    "StatusError",
    "Transport",
    "UrlSearchParams",
    "decode_response",
    "encode_body",
    "encode_query",
    "load_client_config",
    "load_clients_file",
    "resolve_url",
    "validate_status",
]
