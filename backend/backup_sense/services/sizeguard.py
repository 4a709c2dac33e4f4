from typing import Optional

from .errors import PayloadTooLarge


def check_size(length: Optional[int], max_bytes: int) -> None:
    """Raise PayloadTooLarge when `length` is above `max_bytes`.

    `None` means the size is not known yet (no Content-Length, chunked body)
    and passes; the materialized payload is checked again later.
    """
    if length is not None and length > max_bytes:
        raise PayloadTooLarge(length, max_bytes)
