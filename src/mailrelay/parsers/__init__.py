from .body import decode_part_payload, find_body
from .mime_converter import UNSUPPORTED_CONTENT_MARKER, convert_mime

__all__ = ["UNSUPPORTED_CONTENT_MARKER", "convert_mime", "decode_part_payload", "find_body"]
