"""
Nginx Web Server

Builds the resource graph for a single Nginx web server:

1. An AWS provider pinned to the configured region and profile
2. A security group admitting SSH and HTTP, with all egress allowed
3. A key pair whose private key is stored locally as an owner read-only file
4. An Ubuntu 22.04 instance that installs Nginx on first boot

and exports the connection details.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

import pulumi
import pulumi_aws as aws

from .errors import ConfigurationError
from .ec2.instances import create_instance, build_ssh_command
from .ec2.keypairs import ensure_keypair
from .ec2.security_groups import ANYWHERE, create_web_security_group
from .ec2.user_data import render_nginx_user_data
from .utils.ami import resolve_ubuntu_ami
from .utils.ip import get_local_public_ip, format_cidr_from_ip
from .utils.tags import get_default_tags, merge_tags, name_tags

DEFAULT_PROJECT = "nginx-server"
DEFAULT_REGION = "ap-south-1"
DEFAULT_INSTANCE_TYPE = "t2.micro"
AUTO_CIDR = "auto"

@dataclass
class WebServerSettings:
    project: str = DEFAULT_PROJECT
    environment: str = "dev"
    region: str = DEFAULT_REGION
    profile: Optional[str] = None
    key_name: Optional[str] = None
    key_dir: Optional[str] = None
    instance_type: str = DEFAULT_INSTANCE_TYPE
    ssh_cidr: str = ANYWHERE
    root_volume_size: int = 20
    tags: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.key_name:
            self.key_name = f"{self.project}-key"
        if not self.region:
            raise ConfigurationError("An AWS region is required")
        if self.root_volume_size < 8:
            raise ConfigurationError(f"Root volume must be at least 8 GiB, got {self.root_volume_size}")

    @classmethod
    def from_pulumi_config(cls) -> "WebServerSettings":
        """Read settings from the current stack's configuration."""
        config = pulumi.Config()
        aws_config = pulumi.Config("aws")
        return cls(
            project=pulumi.get_project(),
            environment=config.get("environment") or pulumi.get_stack(),
            region=aws_config.get("region") or DEFAULT_REGION,
            profile=aws_config.get("profile"),
            key_name=config.get("keyName"),
            key_dir=config.get("keyDir"),
            instance_type=config.get("instanceType") or DEFAULT_INSTANCE_TYPE,
            ssh_cidr=config.get("sshCidr") or ANYWHERE,
            root_volume_size=config.get_int("rootVolumeSize") or 20,
            tags=config.get_object("tags") or {},
        )

    def resolve_ssh_cidr(self) -> str:
        """The CIDR allowed to SSH in; ``auto`` means this machine's public IP."""
        if self.ssh_cidr != AUTO_CIDR:
            return self.ssh_cidr
        local_ip = get_local_public_ip()
        if not local_ip:
            raise ConfigurationError("Failed to determine local IP address for sshCidr=auto")
        return format_cidr_from_ip(local_ip)

class WebServer:
    """The resources making up one deployed web server."""

    def __init__(
        self,
        provider: aws.Provider,
        security_group: aws.ec2.SecurityGroup,
        keypair: aws.ec2.KeyPair,
        key_path: str,
        ami_id: str,
        instance: aws.ec2.Instance,
    ):
        self.provider = provider
        self.security_group = security_group
        self.keypair = keypair
        self.key_path = key_path
        self.ami_id = ami_id
        self.instance = instance
        self.ssh_command = build_ssh_command(key_path, instance.public_ip)

    def export(self):
        pulumi.export("instance_id", self.instance.id)
        pulumi.export("public_ip", self.instance.public_ip)
        pulumi.export("public_dns", self.instance.public_dns)
        pulumi.export("ssh_command", self.ssh_command)
        pulumi.export("security_group_id", self.security_group.id)
        pulumi.export("key_name", self.keypair.key_name)
        pulumi.export("key_path", self.key_path)
        # The instance keeps its launch image when a newer AMI is resolved.
        pulumi.export("ami_id", self.instance.ami)

def deploy_web_server(settings: WebServerSettings) -> WebServer:
    """
    Declare the web server resources and export their connection details.

    Args:
        settings: Deployment settings

    Returns:
        WebServer: The declared resources
    """
    project = settings.project
    tags = merge_tags(get_default_tags(project, settings.environment), settings.tags)

    provider = aws.Provider(
        f"{project}-aws",
        region=settings.region,
        profile=settings.profile,
    )
    opts = pulumi.ResourceOptions(provider=provider)

    ssh_cidr = settings.resolve_ssh_cidr()
    if ssh_cidr == ANYWHERE:
        pulumi.log.warn("SSH is open to 0.0.0.0/0; set sshCidr to restrict it")

    security_group = create_web_security_group(
        f"{project}-sg",
        ssh_cidr_blocks=[ssh_cidr],
        tags=name_tags(tags, f"{project}-sg"),
        opts=opts,
    )

    keypair, key_path = ensure_keypair(
        settings.key_name,
        key_dir=settings.key_dir,
        tags=name_tags(tags, f"{project}-key"),
        opts=opts,
    )

    ami_id = resolve_ubuntu_ami(provider=provider)

    instance = create_instance(
        f"{project}-instance",
        instance_type=settings.instance_type,
        security_group_ids=[security_group.id],
        key_name=keypair.key_name,
        ami_id=ami_id,
        user_data=render_nginx_user_data(project),
        tags=name_tags(tags, f"{project}-instance"),
        root_volume_size=settings.root_volume_size,
        opts=opts,
    )

    server = WebServer(provider, security_group, keypair, key_path, ami_id, instance)
    server.export()
    return server
