import fnmatch
import pulumi
import pulumi_aws as aws
from typing import Dict, List, Optional

from ..errors import AmiResolutionError

CANONICAL_OWNER_ID = "099720109477"  # Canonical
UBUNTU_JAMMY_NAME_PATTERN = "ubuntu/images/hvm-ssd/ubuntu-jammy-22.04-amd64-server-*"

def ubuntu_image_pattern(
    version: str = "22.04",
    codename: str = "jammy",
    architecture: str = "amd64",
    virtualization_type: str = "hvm",
    volume_type: str = "ssd",
) -> str:
    """Name pattern Canonical publishes its Ubuntu server images under."""
    return f"ubuntu/images/{virtualization_type}-{volume_type}/ubuntu-{codename}-{version}-{architecture}-server-*"

def ubuntu_ami_filters(
    version: str = "22.04",
    codename: str = "jammy",
    architecture: str = "amd64",
    virtualization_type: str = "hvm",
    volume_type: str = "ssd",
) -> List[Dict[str, List[str]]]:
    """
    Build the DescribeImages filters for an Ubuntu server image.

    Args:
        version: Ubuntu version (e.g., "22.04")
        codename: Ubuntu release codename (e.g., "jammy")
        architecture: CPU architecture (amd64, arm64)
        virtualization_type: Virtualization type (hvm, paravirtual)
        volume_type: Root volume family in the image name (ssd, ssd-gp3)

    Returns:
        List[Dict[str, List[str]]]: Filters for ``aws.ec2.get_ami``
    """
    return [
        {
            "name": "name",
            "values": [ubuntu_image_pattern(version, codename, architecture, virtualization_type, volume_type)]
        },
        {
            "name": "virtualization-type",
            "values": [virtualization_type]
        },
    ]

def matches_ubuntu_image(name: Optional[str], pattern: str = UBUNTU_JAMMY_NAME_PATTERN) -> bool:
    """Return True if an image name matches the given glob pattern."""
    if not name:
        return False
    return fnmatch.fnmatchcase(name, pattern)

def get_ubuntu_ami(
    version: str = "22.04",
    codename: str = "jammy",
    architecture: str = "amd64",
    virtualization_type: str = "hvm",
    provider: Optional[aws.Provider] = None,
) -> aws.ec2.AwaitableGetAmiResult:
    """
    Look up the most recent Ubuntu AMI published by Canonical.

    Args:
        version: Ubuntu version (e.g., "22.04")
        codename: Ubuntu release codename (e.g., "jammy")
        architecture: CPU architecture (amd64, arm64)
        virtualization_type: Virtualization type (hvm, paravirtual)
        provider: Optional provider pinning the lookup to a region/profile

    Returns:
        aws.ec2.AwaitableGetAmiResult: The matching image
    """
    opts = pulumi.InvokeOptions(provider=provider) if provider else None
    return aws.ec2.get_ami(
        most_recent=True,
        owners=[CANONICAL_OWNER_ID],
        filters=ubuntu_ami_filters(version, codename, architecture, virtualization_type),
        opts=opts,
    )

def resolve_ubuntu_ami(
    version: str = "22.04",
    codename: str = "jammy",
    architecture: str = "amd64",
    provider: Optional[aws.Provider] = None,
) -> str:
    """
    Resolve the Ubuntu AMI ID and check it really is a Canonical image.

    Raises:
        AmiResolutionError: If the lookup fails or returns an image that is
            not owned by Canonical or does not match the requested release.

    Returns:
        str: AMI ID
    """
    try:
        ami = get_ubuntu_ami(version, codename, architecture, provider=provider)
    except Exception as e:
        raise AmiResolutionError(f"No Ubuntu {version} ({architecture}) image found: {e}") from e

    pattern = ubuntu_image_pattern(version, codename, architecture)
    if ami.owner_id != CANONICAL_OWNER_ID:
        raise AmiResolutionError(
            f"AMI {ami.id} is owned by {ami.owner_id}, expected Canonical ({CANONICAL_OWNER_ID})"
        )
    if not matches_ubuntu_image(ami.name, pattern):
        raise AmiResolutionError(f"AMI {ami.id} name '{ami.name}' does not match '{pattern}'")

    pulumi.log.info(f"Resolved Ubuntu {version} AMI {ami.id} ({ami.name})")
    return ami.id
