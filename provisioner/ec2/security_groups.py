import pulumi
import pulumi_aws as aws
from typing import List, Dict, Optional, Sequence, Union, Any

ANYWHERE = "0.0.0.0/0"
SSH_PORT = 22
HTTP_PORT = 80
WEB_SERVER_PORTS = (SSH_PORT, HTTP_PORT)

# EC2 accepts protocol names, IANA numbers and "all" for "-1".
PROTOCOL_ALIASES = {
    "all": "-1",
    "6": "tcp",
    "17": "udp",
    "1": "icmp",
}

def normalise_protocol(protocol: Union[str, int]) -> str:
    """Canonical EC2 name for ``protocol``: ``tcp``, ``udp``, ``icmp`` or ``-1``."""
    protocol = str(protocol).strip().lower()
    return PROTOCOL_ALIASES.get(protocol, protocol)

class IngressRule:
    def __init__(
        self,
        protocol: str,
        from_port: int,
        to_port: int,
        cidr_blocks: Optional[List[str]] = None,
        description: Optional[str] = None
    ):
        self.protocol = protocol
        self.from_port = from_port
        self.to_port = to_port
        self.cidr_blocks = cidr_blocks or []
        self.description = description

    @classmethod
    def from_dict(cls, rule: Dict[str, Any]) -> "IngressRule":
        return cls(
            protocol=rule["protocol"],
            from_port=rule["from_port"],
            to_port=rule["to_port"],
            cidr_blocks=rule.get("cidr_blocks"),
            description=rule.get("description"),
        )

    def covers_port(self, port: int) -> bool:
        """True if this rule admits TCP traffic on ``port``."""
        protocol = normalise_protocol(self.protocol)
        if protocol == "-1":
            return True
        return protocol == "tcp" and self.from_port <= port <= self.to_port

    def to_args(self) -> aws.ec2.SecurityGroupIngressArgs:
        return aws.ec2.SecurityGroupIngressArgs(
            protocol=self.protocol,
            from_port=self.from_port,
            to_port=self.to_port,
            cidr_blocks=self.cidr_blocks,
            description=self.description,
        )

    def __repr__(self) -> str:
        return f"IngressRule({self.protocol} {self.from_port}-{self.to_port} from {self.cidr_blocks})"

ALL_EGRESS = {
    "protocol": "-1",
    "from_port": 0,
    "to_port": 0,
    "cidr_blocks": [ANYWHERE],
    "description": "Allow all outbound traffic",
}

def web_server_ingress_rules(
    ssh_cidr_blocks: Optional[Sequence[str]] = None,
    http_cidr_blocks: Optional[Sequence[str]] = None,
) -> List[IngressRule]:
    """
    SSH and HTTP ingress rules for a web server.

    Both default to ``0.0.0.0/0``.
    """
    return [
        IngressRule(
            protocol="tcp",
            from_port=SSH_PORT,
            to_port=SSH_PORT,
            cidr_blocks=list(ssh_cidr_blocks or [ANYWHERE]),
            description="SSH access"
        ),
        IngressRule(
            protocol="tcp",
            from_port=HTTP_PORT,
            to_port=HTTP_PORT,
            cidr_blocks=list(http_cidr_blocks or [ANYWHERE]),
            description="HTTP access"
        ),
    ]

def ensure_required_ingress(
    rules: Sequence[Union[Dict[str, Any], IngressRule]],
    required_ports: Sequence[int] = WEB_SERVER_PORTS,
    cidr_blocks: Optional[Sequence[str]] = None,
) -> List[IngressRule]:
    """
    Normalise ``rules`` and append a TCP rule for every required port
    that none of them covers.
    """
    normalised = [r if isinstance(r, IngressRule) else IngressRule.from_dict(r) for r in rules]
    for port in required_ports:
        if not any(rule.covers_port(port) for rule in normalised):
            normalised.append(IngressRule(
                protocol="tcp",
                from_port=port,
                to_port=port,
                cidr_blocks=list(cidr_blocks or [ANYWHERE]),
                description=f"Required access on port {port}",
            ))
    return normalised

def create_security_group(
    name: str,
    description: str,
    ingress_rules: Sequence[Union[Dict[str, Any], IngressRule]],
    egress_rules: Optional[List[Dict[str, Any]]] = None,
    vpc_id: Optional[pulumi.Input[str]] = None,
    tags: Optional[Dict[str, str]] = None,
    opts: Optional[pulumi.ResourceOptions] = None,
) -> aws.ec2.SecurityGroup:
    """
    Create a security group with the specified rules.

    Rules are declared inline on the group so the whole rule set is one
    resource and compares cleanly between runs.

    Args:
        name: Name of the security group
        description: Description of the security group
        ingress_rules: List of ingress rules
        egress_rules: Optional list of egress rules (default: allow all outbound)
        vpc_id: Optional VPC ID (default VPC when omitted)
        tags: Optional dictionary of tags
        opts: Optional Pulumi resource options

    Returns:
        aws.ec2.SecurityGroup: The created security group
    """
    ingress = [
        (r if isinstance(r, IngressRule) else IngressRule.from_dict(r)).to_args()
        for r in ingress_rules
    ]

    if egress_rules is None:
        egress_rules = [ALL_EGRESS]

    egress = [
        aws.ec2.SecurityGroupEgressArgs(
            protocol=rule["protocol"],
            from_port=rule["from_port"],
            to_port=rule["to_port"],
            cidr_blocks=rule.get("cidr_blocks", []),
            description=rule.get("description"),
        )
        for rule in egress_rules
    ]

    return aws.ec2.SecurityGroup(
        name,
        vpc_id=vpc_id,
        description=description,
        ingress=ingress,
        egress=egress,
        tags=tags,
        opts=opts,
    )

def create_web_security_group(
    name: str,
    ssh_cidr_blocks: Optional[Sequence[str]] = None,
    extra_rules: Optional[Sequence[Union[Dict[str, Any], IngressRule]]] = None,
    vpc_id: Optional[pulumi.Input[str]] = None,
    tags: Optional[Dict[str, str]] = None,
    opts: Optional[pulumi.ResourceOptions] = None,
) -> aws.ec2.SecurityGroup:
    """
    Create the web server security group.

    The group always admits TCP 22 and TCP 80 and allows all egress,
    regardless of ``extra_rules``.
    """
    rules = web_server_ingress_rules(ssh_cidr_blocks) + list(extra_rules or [])
    rules = ensure_required_ingress(rules, WEB_SERVER_PORTS)
    return create_security_group(
        name,
        description="Allow SSH and HTTP inbound, all outbound",
        ingress_rules=rules,
        egress_rules=[ALL_EGRESS],
        vpc_id=vpc_id,
        tags=tags,
        opts=opts,
    )
