from .errors import *  # noqa: F401,F403
from .errors import __all__ as _error_names
from .client import RestClient
from .models import HTTPRequest, RateLimitResponse
from .routes import API_BASE, API_VERSION, api_url, bucket_key, build_query_string

__all__ = [
    *_error_names,
    "API_BASE",
    "API_VERSION",
    "HTTPRequest",
    "RateLimitResponse",
    "RestClient",
    "api_url",
    "bucket_key",
    "build_query_string",
]
