import pytest
import pulumi
import pulumi_aws as aws
from provisioner.ec2.security_groups import (
    ALL_EGRESS,
    IngressRule,
    create_security_group,
    create_web_security_group,
    ensure_required_ingress,
    normalise_protocol,
    web_server_ingress_rules,
)

def _admits(ingress, port, cidr="0.0.0.0/0"):
    return any(
        rule["protocol"] == "tcp"
        and rule["from_port"] <= port <= rule["to_port"]
        and cidr in rule["cidr_blocks"]
        for rule in ingress
    )

def _allows_all_egress(egress):
    return any(
        rule["protocol"] == "-1" and "0.0.0.0/0" in rule["cidr_blocks"]
        for rule in egress
    )

def test_web_server_ingress_rules_default_to_anywhere():
    """Test SSH and HTTP rules are open to the world by default."""
    rules = web_server_ingress_rules()
    
    assert [(r.from_port, r.to_port) for r in rules] == [(22, 22), (80, 80)]
    assert all(r.protocol == "tcp" for r in rules)
    assert all(r.cidr_blocks == ["0.0.0.0/0"] for r in rules)

def test_web_server_ingress_rules_restrict_ssh_only():
    """Test restricting SSH leaves HTTP public."""
    ssh, http = web_server_ingress_rules(ssh_cidr_blocks=["198.51.100.7/32"])
    
    assert ssh.cidr_blocks == ["198.51.100.7/32"]
    assert http.cidr_blocks == ["0.0.0.0/0"]

def test_ensure_required_ingress_adds_missing_ports():
    """Test missing required ports get a rule of their own."""
    rules = ensure_required_ingress([
        {"protocol": "tcp", "from_port": 443, "to_port": 443, "cidr_blocks": ["0.0.0.0/0"]},
    ])
    
    ports = sorted(r.from_port for r in rules)
    assert ports == [22, 80, 443]

def test_ensure_required_ingress_accepts_port_ranges():
    """Test a range covering the required ports is enough."""
    rules = ensure_required_ingress([IngressRule("tcp", 0, 1024, ["10.0.0.0/8"])])
    
    assert len(rules) == 1

def test_ensure_required_ingress_udp_does_not_count():
    """Test a UDP rule on port 80 does not satisfy the HTTP requirement."""
    rules = ensure_required_ingress([IngressRule("udp", 80, 80, ["0.0.0.0/0"])], required_ports=[80])
    
    assert len(rules) == 2
    assert rules[1].protocol == "tcp"

@pulumi.runtime.test
def test_create_security_group_with_dict_rules(pulumi_mocks):
    """Test security group creation with dictionary rules."""
    sg = create_security_group(
        name="test-sg-dict",
        description="Test security group with dict rules",
        ingress_rules=[{
            "protocol": "tcp",
            "from_port": 22,
            "to_port": 22,
            "cidr_blocks": ["0.0.0.0/0"],
            "description": "Allow SSH"
        }],
        egress_rules=[{
            "protocol": "tcp",
            "from_port": 443,
            "to_port": 443,
            "cidr_blocks": ["0.0.0.0/0"],
        }],
        tags={"Name": "test-sg-dict"}
    )

    def check_sg_dict_values(values):
        description, ingress, egress = values
        assert description == "Test security group with dict rules"
        assert len(ingress) == 1
        assert len(egress) == 1
        assert egress[0]["from_port"] == 443

    return pulumi.Output.all(sg.description, sg.ingress, sg.egress).apply(check_sg_dict_values)

@pulumi.runtime.test
def test_create_security_group_with_default_egress(pulumi_mocks):
    """Test security group creation with default egress rules."""
    sg = create_security_group(
        name="test-sg-default-egress",
        description="Test security group with default egress",
        ingress_rules=[IngressRule("tcp", 22, 22, ["0.0.0.0/0"], "Allow SSH")],
    )

    def check_egress(egress):
        assert len(egress) == 1
        assert _allows_all_egress(egress)

    return sg.egress.apply(check_egress)

@pulumi.runtime.test
def test_web_security_group_permits_ssh_http_and_all_egress(pulumi_mocks):
    """Test the web server group admits TCP 22 and 80 and allows all egress."""
    sg = create_web_security_group("test-web-sg")

    def check_rules(values):
        ingress, egress = values
        assert _admits(ingress, 22)
        assert _admits(ingress, 80)
        assert _allows_all_egress(egress)

    return pulumi.Output.all(sg.ingress, sg.egress).apply(check_rules)

@pulumi.runtime.test
def test_web_security_group_keeps_required_ports_with_extra_rules(pulumi_mocks):
    """Test extra rules never displace SSH, HTTP or the egress rule."""
    sg = create_web_security_group(
        "test-web-sg-extra",
        ssh_cidr_blocks=["198.51.100.7/32"],
        extra_rules=[IngressRule("tcp", 443, 443, ["0.0.0.0/0"], "HTTPS access")],
    )

    def check_rules(values):
        ingress, egress = values
        assert _admits(ingress, 22, "198.51.100.7/32")
        assert _admits(ingress, 80)
        assert _admits(ingress, 443)
        assert _allows_all_egress(egress)

    return pulumi.Output.all(sg.ingress, sg.egress).apply(check_rules)

def test_all_egress_rule():
    """Test the egress rule allows every protocol to anywhere."""
    assert ALL_EGRESS["protocol"] == "-1"
    assert ALL_EGRESS["cidr_blocks"] == ["0.0.0.0/0"]

def test_ensure_required_ingress_accepts_protocol_aliases():
    """Test numeric and "all" protocols count as the rules they stand for."""
    rules = ensure_required_ingress([
        {"protocol": "6", "from_port": 22, "to_port": 22, "cidr_blocks": ["10.0.0.0/8"]},
        {"protocol": "6", "from_port": 80, "to_port": 80, "cidr_blocks": ["0.0.0.0/0"]},
    ])
    assert len(rules) == 2

    rules = ensure_required_ingress([IngressRule("all", 0, 0, ["10.0.0.0/8"])])
    assert len(rules) == 1

def test_normalise_protocol():
    """Test protocol aliases map onto the EC2 names."""
    assert normalise_protocol("TCP") == "tcp"
    assert normalise_protocol(6) == "tcp"
    assert normalise_protocol("17") == "udp"
    assert normalise_protocol("all") == "-1"
    assert normalise_protocol("-1") == "-1"
