"""
CLI helper functions and utilities.
"""

from .display import (
    print_json, print_profile_table, print_record_failures, print_resolved_config,
    print_template_table,
)
from .errors import handle_errors

__all__ = [
    'print_json',
    'print_profile_table',
    'print_record_failures',
    'print_resolved_config',
    'print_template_table',
    'handle_errors',
]
