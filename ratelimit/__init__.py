from .bucket import Bucket, CustomRateLimit, GlobalRateLimit, RateLimitHeaderError
from .limiter import BucketStore, DEFAULT_CUSTOM_LIMITS

__all__ = [
    "Bucket",
    "BucketStore",
    "CustomRateLimit",
    "DEFAULT_CUSTOM_LIMITS",
    "GlobalRateLimit",
    "RateLimitHeaderError",
]
