"""Unit tests for CLI output formatters."""

from __future__ import annotations

from k3d_manager.bootstrap import StepActionError, StepResult, StepStatus
from k3d_manager.formatters import print_capabilities, print_plan, print_step_result


class TestFormatters:
    """Tests for formatter output."""

    def test_print_plan(self, plan, capsys):
        print_plan(plan)
        out = capsys.readouterr().out
        assert "test-cluster" in out
        assert "Worker Nodes: 2" in out
        assert "install-monitoring: ✓" in out

    def test_capabilities_hide_absent_overlays(self, capsys):
        print_capabilities({"helm": False, "values:ingress": False, "manifest:rbac": True})
        out = capsys.readouterr().out
        assert "✗ helm" in out
        assert "values:ingress" not in out
        assert "✓ manifest:rbac" in out

    def test_step_result_lines(self, capsys):
        print_step_result(
            StepResult("ingress", 3, StepStatus.SUCCEEDED, payload_source="external", duration_seconds=1.34)
        )
        print_step_result(StepResult("monitoring", 4, StepStatus.SKIPPED, reason="feature disabled"))
        out = capsys.readouterr().out
        assert "✓ [ 3] ingress (1.3s, external)" in out
        assert "- [ 4] monitoring (skipped: feature disabled)" in out

    def test_failed_step_goes_to_stderr(self, capsys):
        error = StepActionError("helm exploded", step="argo")
        print_step_result(StepResult("argo", 6, StepStatus.FAILED, error=error))
        captured = capsys.readouterr()
        assert "✗ [ 6] argo: helm exploded" in captured.err
        assert captured.out == ""
