"""
AWS Profile Manager

This module resolves the AWS profile the provisioner runs as. It lists the
profiles configured on the system, builds boto3 sessions for them and checks
that their credentials are accepted by STS before any stack is touched.
"""

import os
import boto3
from botocore.exceptions import BotoCoreError, ClientError, ProfileNotFound
from typing import Dict, List, Optional, Tuple

from ..errors import CredentialsError, ProfileNotFoundError

__all__ = [
    'list_profiles',
    'get_current_profile',
    'create_session',
    'get_caller_identity',
    'validate_profile',
    'ProfileInfo'
]

class ProfileInfo:
    """Contains information about an AWS profile."""
    def __init__(self, name: str, region: Optional[str] = None,
                 is_default: bool = False, is_active: bool = False,
                 account_id: Optional[str] = None, user_identity: Optional[str] = None):
        self.name = name
        self.region = region
        self.is_default = is_default
        self.is_active = is_active
        self.account_id = account_id
        self.user_identity = user_identity  # IAM user/role name

    def __str__(self) -> str:
        """Return string representation of the profile info."""
        status = []
        if self.is_active:
            status.append("ACTIVE")
        if self.is_default:
            status.append("DEFAULT")

        status_str = f" ({', '.join(status)})" if status else ""
        region_str = f" - {self.region}" if self.region else ""
        account_str = f" - Account: {self.account_id}" if self.account_id else ""
        identity_str = f" [{self.user_identity}]" if self.user_identity else ""

        return f"{self.name}{region_str}{account_str}{identity_str}{status_str}"

def get_current_profile() -> Optional[str]:
    """
    Get the name of the currently active AWS profile.

    Returns:
        Name of the active profile or None if using default credentials
    """
    profile = os.environ.get("AWS_PROFILE")
    if profile:
        return profile

    profile = os.environ.get("AWS_DEFAULT_PROFILE")
    if profile:
        return profile

    return None

def create_session(profile_name: Optional[str] = None, region: Optional[str] = None) -> boto3.Session:
    """
    Create a boto3 session for a profile.

    Args:
        profile_name: AWS profile name or None for the default credential chain
        region: AWS region for clients created from the session

    Raises:
        ProfileNotFoundError: If the profile is not configured
    """
    try:
        return boto3.Session(profile_name=profile_name, region_name=region)
    except ProfileNotFound as e:
        raise ProfileNotFoundError(f"Profile '{profile_name}' not found") from e

def _identity_name(arn: str) -> Optional[str]:
    # arn:aws:iam::123456789012:user/alice or arn:aws:sts::...:assumed-role/Role/session
    resource = arn.split(":", 5)[-1]
    parts = resource.split("/")
    return parts[1] if len(parts) >= 2 else None

def get_caller_identity(profile_name: Optional[str] = None, region: Optional[str] = None) -> Dict[str, str]:
    """
    Ask STS who the profile's credentials belong to.

    Returns:
        Dict with ``Account``, ``Arn`` and ``UserId``

    Raises:
        CredentialsError: If the credentials are missing, expired or rejected
    """
    session = create_session(profile_name, region)
    try:
        identity = session.client("sts").get_caller_identity()
    except (BotoCoreError, ClientError) as e:
        raise CredentialsError(f"Credential validation failed: {e}") from e
    return {key: identity[key] for key in ("Account", "Arn", "UserId") if key in identity}

def list_profiles(fetch_account_ids: bool = False) -> List[ProfileInfo]:
    """
    List all AWS profiles configured on the system.

    Args:
        fetch_account_ids: Whether to call STS for each profile (can be slow)

    Returns:
        List of ProfileInfo objects representing each AWS profile
    """
    current_profile = get_current_profile()
    profiles = []

    for name in sorted(boto3.Session().available_profiles):
        session = create_session(name)
        account_id = None
        user_identity = None

        if fetch_account_ids or name == current_profile:
            try:
                identity = get_caller_identity(name)
                account_id = identity.get("Account")
                user_identity = _identity_name(identity.get("Arn", ""))
            except CredentialsError:
                pass

        profiles.append(ProfileInfo(
            name=name,
            region=session.region_name,
            is_default=(name == "default"),
            is_active=(name == current_profile),
            account_id=account_id,
            user_identity=user_identity
        ))

    return profiles

def validate_profile(profile_name: Optional[str] = None, region: Optional[str] = None) -> Tuple[bool, str]:
    """
    Validate AWS credentials for a profile.

    Args:
        profile_name: Name of the profile to validate (uses current if None)
        region: Region to validate against

    Returns:
        Tuple of (success, message)
    """
    try:
        identity = get_caller_identity(profile_name, region)
    except CredentialsError as e:
        return False, str(e)

    return True, f"Credentials are valid (account {identity.get('Account')}, {identity.get('Arn')})"
