"""
Response helpers for verification failures.
"""

from .error_envelope import make_failure_response

__all__ = [
    'make_failure_response',
]
