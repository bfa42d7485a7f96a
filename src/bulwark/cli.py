"""
Mantissa Bulwark CLI entry point.

This module provides the command-line interface for Bulwark.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

import yaml

from bulwark import __version__
from bulwark.admission import AdmissionResult, SecurityContextConstraintAdmission
from bulwark.config import AdmissionConfiguration, build_admission, load_config_from_env
from bulwark.errors import BulwarkError
from bulwark.models import Pod, SecurityPolicy
from bulwark.observability import configure_logging
from bulwark.stores import PolicyLoader


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="bulwark",
        description="Mantissa Bulwark - Security Context Constraint Admission",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"bulwark {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be repeated)",
    )
    parser.add_argument(
        "--config",
        help="Configuration file (JSON or YAML); defaults to environment settings",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    admit_parser = subparsers.add_parser(
        "admit",
        help="Run admission for a pod manifest",
        description="Evaluate a pod manifest against the configured policies.",
    )
    admit_parser.add_argument("pod_file", help="Pod manifest (YAML or JSON)")
    admit_parser.add_argument(
        "--namespace",
        "-n",
        default="",
        help="Request namespace (default: the pod's namespace)",
    )
    admit_parser.add_argument(
        "--operation",
        default="CREATE",
        choices=["CREATE", "UPDATE", "DELETE", "CONNECT"],
        help="Request operation (default: CREATE)",
    )
    admit_parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
    admit_parser.add_argument(
        "--output",
        "-o",
        help="Write the admitted pod manifest to this file",
    )

    policies_parser = subparsers.add_parser(
        "policies",
        help="List configured policies",
    )
    policies_parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )

    return parser


def _load_config(args: argparse.Namespace) -> AdmissionConfiguration:
    config_path = getattr(args, "config", None)
    if config_path:
        config = AdmissionConfiguration.from_file(config_path)
    else:
        config = load_config_from_env()

    # -v overrides the configured level
    if not getattr(args, "verbose", 0):
        configure_logging(level=config.log_level, format=config.log_format)
    return config


def _load_pod(path: str) -> Pod:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a pod manifest")
    return Pod.from_dict(data)


def _format_result_table(result: AdmissionResult) -> str:
    """Format an admission result for the terminal."""
    lines = [
        f"Pod: {result.namespace}/{result.pod_name}",
        f"Decision: {result.decision.value.upper()}",
    ]
    if result.reason:
        lines.append(f"Reason: {result.reason.value}")
    if result.message:
        lines.append(f"Message: {result.message}")
    if result.policies:
        lines.append("")
        width = max(len(name) for name in result.policies)
        lines.append(f"{'Container':<{width}}  Policy")
        lines.append("-" * (width + 10))
        for container, policy in result.policies.items():
            lines.append(f"{container:<{width}}  {policy}")
    if result.errors:
        lines.append("")
        lines.append("Errors:")
        for error in result.errors:
            lines.append(f"  - {error}")
    return "\n".join(lines)


def _format_policy_table(policies: list[SecurityPolicy]) -> str:
    """Format policies as a table."""
    if not policies:
        return "No policies found."

    name_width = max(len("Name"), max(len(p.name) for p in policies))
    user_width = max(len("RunAsUser"), max(len(p.run_as_user.type) for p in policies))
    lines = []
    header = f"{'Name':<{name_width}}  {'RunAsUser':<{user_width}}  {'SELinux':<9}  Priv   Users/Groups"
    lines.append(header)
    lines.append("-" * len(header))
    for p in sorted(policies, key=lambda p: p.name):
        acl = len(p.users) + len(p.groups)
        priv = "yes" if p.allow_privileged else "no"
        lines.append(
            f"{p.name:<{name_width}}  {p.run_as_user.type:<{user_width}}  "
            f"{p.se_linux.type:<9}  {priv:<5}  {acl}"
        )
    return "\n".join(lines)


def cmd_admit(args: argparse.Namespace) -> int:
    """Handle the admit command."""
    try:
        config = _load_config(args)
        pod = _load_pod(args.pod_file)
        admission: SecurityContextConstraintAdmission = build_admission(config)
        result = admission.admit(pod, args.namespace or pod.namespace, args.operation)
    except (OSError, ValueError, yaml.YAMLError, BulwarkError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.format == "json":
        output = result.to_dict()
        if result.allowed:
            output["pod_manifest"] = pod.to_dict()
        print(json.dumps(output, indent=2))
    else:
        print(_format_result_table(result))

    output_path = getattr(args, "output", None)
    if output_path and result.allowed:
        with open(output_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(pod.to_dict(), f, default_flow_style=False, sort_keys=False)

    return 0 if result.allowed else 1


def cmd_policies(args: argparse.Namespace) -> int:
    """Handle the policies command."""
    try:
        config = _load_config(args)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    policies = PolicyLoader(config.policy_dirs).load_all().policies

    if args.format == "json":
        print(json.dumps([p.to_dict() for p in policies], indent=2))
    else:
        print(_format_policy_table(policies))
        print(f"\nTotal: {len(policies)} policy(ies)")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        configure_logging(level="DEBUG" if args.verbose > 1 else "INFO")
    else:
        logging.getLogger("bulwark").setLevel(logging.WARNING)

    if args.command is None:
        parser.print_help()
        return 0

    command_handlers = {
        "admit": cmd_admit,
        "policies": cmd_policies,
    }

    handler = command_handlers.get(args.command)
    if handler:
        return handler(args)

    print(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
