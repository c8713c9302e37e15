"""
EC2 infrastructure components.
"""

from .instances import create_instance, get_instance_public_ip, get_instance_public_dns, build_ssh_command
from .security_groups import (
    create_security_group,
    create_web_security_group,
    web_server_ingress_rules,
    IngressRule,
)
from .keypairs import ensure_keypair, write_private_key, remove_private_key
from .user_data import render_nginx_user_data

__all__ = [
    'create_instance',
    'get_instance_public_ip',
    'get_instance_public_dns',
    'build_ssh_command',
    'create_security_group',
    'create_web_security_group',
    'web_server_ingress_rules',
    'IngressRule',
    'ensure_keypair',
    'write_private_key',
    'remove_private_key',
    'render_nginx_user_data',
]
