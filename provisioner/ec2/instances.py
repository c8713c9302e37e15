import pulumi
import pulumi_aws as aws
from typing import List, Optional, Dict

from ..utils.ami import resolve_ubuntu_ami

DEFAULT_SSH_USER = "ubuntu"

def create_instance(
    name: str,
    instance_type: str,
    security_group_ids: List[pulumi.Input[str]],
    key_name: Optional[pulumi.Input[str]] = None,
    ami_id: Optional[str] = None,
    user_data: Optional[str] = None,
    subnet_id: Optional[pulumi.Input[str]] = None,
    tags: Optional[Dict[str, str]] = None,
    root_volume_size: int = 20,
    opts: Optional[pulumi.ResourceOptions] = None,
) -> aws.ec2.Instance:
    """
    Create an EC2 instance with the specified configuration.

    Args:
        name: Name of the instance
        instance_type: EC2 instance type (e.g., t2.micro)
        security_group_ids: List of security group IDs to attach
        key_name: Optional key pair name for SSH access
        ami_id: Optional AMI ID (defaults to latest Ubuntu 22.04)
        user_data: Optional user data script
        subnet_id: Optional subnet ID to launch in (default VPC when omitted)
        tags: Optional dictionary of tags
        root_volume_size: Root volume size in GiB
        opts: Optional Pulumi resource options

    Returns:
        aws.ec2.Instance: The created EC2 instance
    """
    if not ami_id:
        provider = opts.provider if opts else None
        ami_id = resolve_ubuntu_ami(provider=provider)

    # A newer image being published must not replace a running instance.
    instance_opts = pulumi.ResourceOptions.merge(
        opts or pulumi.ResourceOptions(),
        pulumi.ResourceOptions(ignore_changes=["ami"]),
    )

    return aws.ec2.Instance(
        name,
        instance_type=instance_type,
        ami=ami_id,
        vpc_security_group_ids=security_group_ids,
        user_data=user_data,
        user_data_replace_on_change=False,
        tags=tags,
        key_name=key_name,
        subnet_id=subnet_id,
        associate_public_ip_address=True,
        root_block_device=aws.ec2.InstanceRootBlockDeviceArgs(
            volume_size=root_volume_size,
            volume_type="gp3",
            delete_on_termination=True,
        ),
        opts=instance_opts,
    )

def get_instance_public_ip(instance: aws.ec2.Instance) -> pulumi.Output[str]:
    return instance.public_ip

def get_instance_public_dns(instance: aws.ec2.Instance) -> pulumi.Output[str]:
    return instance.public_dns

def build_ssh_command(
    key_path: pulumi.Input[str],
    host: pulumi.Input[str],
    user: str = DEFAULT_SSH_USER,
) -> pulumi.Output[str]:
    """
    The ssh invocation for logging in to an instance.

    Args:
        key_path: Path to the private key file
        host: Public IP or DNS name of the instance
        user: Login user (ubuntu on Canonical images)

    Returns:
        pulumi.Output[str]: e.g. ``ssh -i ~/.ssh/web.pem ubuntu@203.0.113.10``
    """
    return pulumi.Output.concat("ssh -i ", key_path, " ", user, "@", host)
