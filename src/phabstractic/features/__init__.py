"""
Reusable building blocks for event components.

- IdentityGenerator: prefixed unique identifiers
- Options / resolve_options: per-component options over system defaults
"""

from phabstractic.features.configuration import Options, OptionsLike, resolve_options
from phabstractic.features.identity import IdentityGenerator

__all__ = [
    "IdentityGenerator",
    "Options",
    "OptionsLike",
    "resolve_options",
]
