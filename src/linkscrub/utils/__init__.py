"""Containers backing the URL fragment parser."""

from linkscrub.utils.hash_params import HashParams
from linkscrub.utils.multimap import FragmentMultimap

__all__ = [
    "FragmentMultimap",
    "HashParams",
]
