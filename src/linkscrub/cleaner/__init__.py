"""Field removal for a single matched provider."""

from linkscrub.cleaner.fields import decode_url, parse_absolute_url, remove_fields_from_url
from linkscrub.cleaner.network import is_local_host

__all__ = [
    "decode_url",
    "is_local_host",
    "parse_absolute_url",
    "remove_fields_from_url",
]
