"""
Utility functions for infrastructure management.
"""

from .tags import get_default_tags, merge_tags
from .ami import (
    CANONICAL_OWNER_ID,
    UBUNTU_JAMMY_NAME_PATTERN,
    get_ubuntu_ami,
    resolve_ubuntu_ami,
)
from .ip import get_local_public_ip, format_cidr_from_ip

__all__ = [
    'get_default_tags',
    'merge_tags',
    'CANONICAL_OWNER_ID',
    'UBUNTU_JAMMY_NAME_PATTERN',
    'get_ubuntu_ami',
    'resolve_ubuntu_ami',
    'get_local_public_ip',
    'format_cidr_from_ip',
]
