"""
Tests for Mantissa Bulwark CLI.

Tests CLI argument parsing, command execution, and output formatting.
"""

from __future__ import annotations

import argparse
import json

import pytest
import yaml

from bulwark.cli import create_parser, main

RESTRICTED = {
    "name": "restricted",
    "runAsUser": {"type": "MustRunAsRange", "allocationKey": "openshift.io/sa.scc.uid-range"},
    "seLinuxContext": {
        "type": "MustRunAs",
        "seLinuxOptions": {"user": "system_u", "role": "system_r", "type": "svirt_lxc_net_t", "level": "s0:c1,c0"},
    },
    "seccomp": {"allowedProfiles": ["runtime/default"]},
    "groups": ["system:serviceaccounts"],
}


def pod_manifest(privileged: bool | None = None) -> dict:
    container: dict = {"name": "app", "image": "nginx"}
    if privileged is not None:
        container["securityContext"] = {"privileged": privileged}
    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {"name": "web", "namespace": "team-a"},
        "spec": {"serviceAccountName": "builder", "containers": [container]},
    }


@pytest.fixture
def workspace(tmp_path):
    """Write policies, a static backend configuration and pod manifests."""
    policy_dir = tmp_path / "policies"
    policy_dir.mkdir()
    (policy_dir / "restricted.yaml").write_text(yaml.safe_dump(RESTRICTED))

    config = {
        "policy_dirs": [str(policy_dir)],
        "backend": "static",
        "static": {
            "service_accounts": [{"name": "builder", "namespace": "team-a"}],
            "namespace_annotations": {"team-a": {"openshift.io/sa.scc.uid-range": "1000100000/10000"}},
        },
        "log_level": "WARNING",
    }
    config_path = tmp_path / "bulwark.yaml"
    config_path.write_text(yaml.safe_dump(config))

    (tmp_path / "pod.yaml").write_text(yaml.safe_dump(pod_manifest()))
    (tmp_path / "privileged.yaml").write_text(yaml.safe_dump(pod_manifest(privileged=True)))
    return tmp_path


class TestCLIParser:
    """Tests for CLI argument parsing."""

    @pytest.fixture
    def parser(self) -> argparse.ArgumentParser:
        """Return the CLI argument parser."""
        return create_parser()

    def test_cli_parser_admit(self, parser):
        """Test admit command argument parsing."""
        args = parser.parse_args(["admit", "pod.yaml", "-n", "team-a", "--format", "json"])

        assert args.command == "admit"
        assert args.pod_file == "pod.yaml"
        assert args.namespace == "team-a"
        assert args.format == "json"

    def test_cli_parser_admit_defaults(self, parser):
        """Test admit command default values."""
        args = parser.parse_args(["admit", "pod.yaml"])

        assert args.operation == "CREATE"
        assert args.format == "table"
        assert args.output is None

    def test_cli_parser_rejects_operation(self, parser):
        """Test unknown operations are rejected by the parser."""
        with pytest.raises(SystemExit):
            parser.parse_args(["admit", "pod.yaml", "--operation", "PATCH"])

    def test_cli_parser_policies(self, parser):
        """Test policies command parsing."""
        args = parser.parse_args(["--config", "c.yaml", "policies"])
        assert args.command == "policies"
        assert args.config == "c.yaml"


class TestCLIAdmit:
    """Tests for the admit command."""

    def test_admit_table(self, workspace, capsys):
        """Test an admitted pod prints the chosen policy."""
        code = main(["--config", str(workspace / "bulwark.yaml"), "admit", str(workspace / "pod.yaml")])

        out = capsys.readouterr().out
        assert code == 0
        assert "Decision: ADMIT" in out
        assert "restricted" in out

    def test_admit_json_includes_manifest(self, workspace, capsys):
        """Test JSON output carries the mutated manifest."""
        code = main(
            [
                "--config",
                str(workspace / "bulwark.yaml"),
                "admit",
                str(workspace / "pod.yaml"),
                "--format",
                "json",
            ]
        )

        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert data["policies"] == {"app": "restricted"}
        sc = data["pod_manifest"]["spec"]["containers"][0]["securityContext"]
        assert sc["runAsUser"] == 1000100000
        assert sc["seccompProfile"] == "runtime/default"

    def test_admit_writes_output(self, workspace):
        """Test the admitted manifest is written to --output."""
        out_path = workspace / "admitted.yaml"
        code = main(
            [
                "--config",
                str(workspace / "bulwark.yaml"),
                "admit",
                str(workspace / "pod.yaml"),
                "-o",
                str(out_path),
            ]
        )

        assert code == 0
        written = yaml.safe_load(out_path.read_text())
        assert written["spec"]["containers"][0]["securityContext"]["privileged"] is False

    def test_deny_exit_code(self, workspace, capsys):
        """Test a denied pod exits 1 and prints the errors."""
        out_path = workspace / "admitted.yaml"
        code = main(
            [
                "--config",
                str(workspace / "bulwark.yaml"),
                "admit",
                str(workspace / "privileged.yaml"),
                "-o",
                str(out_path),
            ]
        )

        out = capsys.readouterr().out
        assert code == 1
        assert "Decision: DENY" in out
        assert "policy_mismatch" in out
        assert "securityContext.privileged" in out
        assert not out_path.exists()

    def test_missing_pod_file(self, workspace, capsys):
        """Test an unreadable pod file exits 2."""
        code = main(["--config", str(workspace / "bulwark.yaml"), "admit", str(workspace / "nope.yaml")])
        assert code == 2
        assert "Error:" in capsys.readouterr().err

    def test_not_a_manifest(self, workspace, capsys):
        """Test a file that is not a mapping exits 2."""
        bad = workspace / "list.yaml"
        bad.write_text("- a\n- b\n")
        code = main(["--config", str(workspace / "bulwark.yaml"), "admit", str(bad)])
        assert code == 2

    def test_delete_passes(self, workspace, capsys):
        """Test out of scope operations are admitted."""
        code = main(
            [
                "--config",
                str(workspace / "bulwark.yaml"),
                "admit",
                str(workspace / "privileged.yaml"),
                "--operation",
                "DELETE",
            ]
        )
        assert code == 0


class TestCLIPolicies:
    """Tests for the policies command."""

    def test_policies_table(self, workspace, capsys):
        """Test policies are listed as a table."""
        code = main(["--config", str(workspace / "bulwark.yaml"), "policies"])

        out = capsys.readouterr().out
        assert code == 0
        assert "restricted" in out
        assert "MustRunAsRange" in out
        assert "Total: 1 policy(ies)" in out

    def test_policies_json(self, workspace, capsys):
        """Test policies are listed as JSON."""
        code = main(["--config", str(workspace / "bulwark.yaml"), "policies", "--format", "json"])

        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert data[0]["name"] == "restricted"

    def test_no_command_prints_help(self, capsys):
        """Test running without a command shows help."""
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()
