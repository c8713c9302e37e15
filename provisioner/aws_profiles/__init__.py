"""
AWS profile resolution: which credentials the provisioner runs as.
"""

from .profile_manager import (
    list_profiles,
    get_current_profile,
    create_session,
    get_caller_identity,
    validate_profile,
    ProfileInfo
)

__all__ = [
    'list_profiles',
    'get_current_profile',
    'create_session',
    'get_caller_identity',
    'validate_profile',
    'ProfileInfo',
]
