from .hmac_auth import (
    API_VERSION_QUERY,
    SigningContext,
    SigningError,
    build_request_url,
    build_string_to_sign,
    compute_content_hash,
    compute_signature,
    decode_access_key,
    format_http_date,
    sign_request,
)

__all__ = [
    "API_VERSION_QUERY",
    "SigningContext",
    "SigningError",
    "build_request_url",
    "build_string_to_sign",
    "compute_content_hash",
    "compute_signature",
    "decode_access_key",
    "format_http_date",
    "sign_request",
]
