"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Remote status lookup package.
"""

from .client import BlockStatusClient, parse_blocks_response

__all__ = [
    "BlockStatusClient",
    "parse_blocks_response",
]
