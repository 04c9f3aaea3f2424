"""
Core functionality for mcpjson.
"""

from mcpjson.core.profiles import ProfileStore
from mcpjson.core.resolver import apply_profile, preview_profile, resolve_profile
from mcpjson.core.templates import TemplateStore

__all__ = [
    "ProfileStore",
    "TemplateStore",
    "apply_profile",
    "preview_profile",
    "resolve_profile",
]
