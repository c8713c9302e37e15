"""
Command-line interface for provisioning the Nginx web server.

    provision init    --region ap-south-1 --profile default --key-name web-key
    provision plan
    provision apply
    provision output
    provision destroy
    provision profiles
"""

import argparse
import json
import sys
from typing import Any, Dict, List, Optional, Tuple

from pulumi.automation import CommandError

from .aws_profiles import list_profiles, validate_profile
from .errors import ProvisioningError
from .stack import StackManager
from .web_server import (
    DEFAULT_INSTANCE_TYPE,
    DEFAULT_PROJECT,
    DEFAULT_REGION,
    WebServerSettings,
)

def parse_tag(value: str) -> Tuple[str, str]:
    key, sep, tag_value = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"Tags must be KEY=VALUE, got '{value}'")
    return key, tag_value

def _add_stack_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("--stack", default="dev", help="Stack name (default: dev)")
    parser.add_argument("--project", default=DEFAULT_PROJECT, help=f"Project name (default: {DEFAULT_PROJECT})")
    parser.add_argument("--output-dir", help="Directory for public_ip.txt and instance_id.txt (default: cwd)")
    parser.add_argument("--work-dir", help="Pulumi workspace directory")
    parser.add_argument("--backend-url", help="Pulumi state backend, e.g. file://~/.pulumi")
    parser.add_argument("--json", action="store_true", help="Output in JSON format")

def _add_settings_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("--region", default=DEFAULT_REGION, help=f"AWS region (default: {DEFAULT_REGION})")
    parser.add_argument("--profile", help="AWS credential profile")
    parser.add_argument("--key-name", help="Key pair name (default: <project>-key)")
    parser.add_argument("--key-dir", help="Directory for the private key file (default: ~/.ssh)")
    parser.add_argument("--instance-type", default=DEFAULT_INSTANCE_TYPE,
                        help=f"EC2 instance type (default: {DEFAULT_INSTANCE_TYPE})")
    parser.add_argument("--ssh-cidr", default="0.0.0.0/0",
                        help="CIDR allowed to SSH in, or 'auto' for this machine's IP (default: 0.0.0.0/0)")
    parser.add_argument("--environment", default="dev", help="Environment tag (default: dev)")
    parser.add_argument("--root-volume-size", type=int, default=20, help="Root volume size in GiB (default: 20)")
    parser.add_argument("--tag", action="append", type=parse_tag, default=[], metavar="KEY=VALUE",
                        help="Extra tag for every resource (repeatable)")

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="provision",
        description="Provision a single Nginx web server on AWS EC2"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    init_parser = subparsers.add_parser("init", help="Create the stack and write its configuration")
    _add_stack_arguments(init_parser)
    _add_settings_arguments(init_parser)
    init_parser.add_argument("--skip-validation", action="store_true",
                             help="Do not check the AWS credentials first")

    plan_parser = subparsers.add_parser("plan", help="Preview the changes an apply would make")
    _add_stack_arguments(plan_parser)
    plan_parser.add_argument("--expect-no-changes", action="store_true",
                             help="Fail if any resource would change")

    apply_parser = subparsers.add_parser("apply", help="Create or update the web server")
    _add_stack_arguments(apply_parser)

    destroy_parser = subparsers.add_parser("destroy", help="Destroy the web server")
    _add_stack_arguments(destroy_parser)

    output_parser = subparsers.add_parser("output", help="Show the stack outputs")
    _add_stack_arguments(output_parser)

    profiles_parser = subparsers.add_parser("profiles", help="List the AWS profiles configured locally")
    profiles_parser.add_argument("--fetch-account-ids", action="store_true",
                                 help="Look up the account of every profile (slow)")

    return parser

def settings_from_args(args: argparse.Namespace) -> WebServerSettings:
    """
    Settings for the stack.

    Only ``init`` takes the deployment flags; the other commands run against
    the configuration ``init`` stored in the stack.
    """
    if args.command != "init":
        return WebServerSettings(project=args.project)
    return WebServerSettings(
        project=args.project,
        environment=args.environment,
        region=args.region,
        profile=args.profile,
        key_name=args.key_name,
        key_dir=args.key_dir,
        instance_type=args.instance_type,
        ssh_cidr=args.ssh_cidr,
        root_volume_size=args.root_volume_size,
        tags=dict(args.tag),
    )

def manager_from_args(args: argparse.Namespace) -> StackManager:
    return StackManager(
        settings_from_args(args),
        stack_name=args.stack,
        work_dir=args.work_dir,
        backend_url=args.backend_url,
        output_dir=args.output_dir,
    )

def display_outputs(outputs: Dict[str, Any], json_output: bool = False):
    """Display stack outputs."""
    if json_output:
        print(json.dumps(outputs, indent=2))
        return

    if not outputs:
        print("No outputs. Run 'provision apply' first.")
        return

    if "public_ip" in outputs:
        print(f"Public IP:   {outputs['public_ip']}")
    if "public_dns" in outputs:
        print(f"Public DNS:  {outputs['public_dns']}")
    if "instance_id" in outputs:
        print(f"Instance ID: {outputs['instance_id']}")
    if "ssh_command" in outputs:
        print(f"SSH:         {outputs['ssh_command']}")
    if "public_ip" in outputs:
        print(f"Web:         http://{outputs['public_ip']}/")

def display_summary(summary: Dict[str, int], json_output: bool = False):
    """Display a per-operation resource count."""
    if json_output:
        print(json.dumps(summary, indent=2))
        return

    changes = {op: count for op, count in summary.items() if op != "same"}
    if not changes:
        print(f"No changes ({summary.get('same', 0)} resources unchanged).")
        return
    print("Resource changes:")
    for op, count in sorted(changes.items()):
        print(f"   {op}: {count}")

def display_profiles(fetch_account_ids: bool = False):
    profiles = list_profiles(fetch_account_ids)
    if not profiles:
        print("No AWS profiles configured. Run 'aws configure' to create one.")
        return
    print(f"Found {len(profiles)} profiles:")
    for profile in profiles:
        print(f"   {profile}")

def main(argv: Optional[List[str]] = None) -> int:
    """Main function."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        print("Please specify a command. Use --help for more information.")
        return 1

    try:
        if args.command == "profiles":
            display_profiles(args.fetch_account_ids)
            return 0

        manager = manager_from_args(args)

        if args.command == "init":
            if not args.skip_validation:
                valid, message = validate_profile(args.profile, args.region)
                print(message)
                if not valid:
                    return 1
            result = manager.init()
            if args.json:
                print(json.dumps(result, indent=2))

        elif args.command == "plan":
            display_summary(manager.plan(expect_no_changes=args.expect_no_changes), args.json)

        elif args.command == "apply":
            display_outputs(manager.apply(), args.json)

        elif args.command == "destroy":
            display_summary(manager.destroy(), args.json)

        elif args.command == "output":
            display_outputs(manager.outputs(), args.json)

    except (ProvisioningError, CommandError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0

if __name__ == "__main__":
    sys.exit(main())
