"""Unit tests for the post-provision summary."""

from __future__ import annotations

from k3d_manager.bootstrap import PostProvisionReporter, StepResult, StepStatus
from k3d_manager.bootstrap.reporter import ARGOCD_PASSWORD_COMMAND, BASIC, FULL


def _results(**statuses: StepStatus) -> list[StepResult]:
    return [
        StepResult(name.replace("_", "-"), rank, status)
        for rank, (name, status) in enumerate(statuses.items())
    ]


class TestPostProvisionReporter:
    """Tests for PostProvisionReporter.summarize()."""

    def test_full_summary(self, plan):
        results = _results(
            cluster=StepStatus.SUCCEEDED,
            ingress=StepStatus.SUCCEEDED,
            monitoring=StepStatus.SUCCEEDED,
            logging=StepStatus.SUCCEEDED,
            delivery_controller=StepStatus.SUCCEEDED,
            sample_app=StepStatus.SUCCEEDED,
        )
        summary = PostProvisionReporter().summarize(plan, results)

        assert summary.variant == FULL
        assert summary.cluster == "test-cluster"
        assert [e.name for e in summary.endpoints] == [
            "Ingress",
            "Prometheus",
            "Grafana",
            "Kibana",
            "Argo CD",
            "Sample app",
        ]
        assert summary.credentials == [f"Argo CD password: {ARGOCD_PASSWORD_COMMAND}"]
        assert "Add to /etc/hosts: 127.0.0.1 nginx.local" in summary.notes
        assert "kubectl config use-context k3d-test-cluster" in summary.commands
        assert "k3d cluster delete test-cluster" in summary.commands

    def test_skipped_steps_have_no_endpoints(self, plan):
        """Test only succeeded steps contribute access information."""
        results = _results(
            cluster=StepStatus.SUCCEEDED,
            monitoring=StepStatus.SKIPPED,
            delivery_controller=StepStatus.SKIPPED,
            logging=StepStatus.SUCCEEDED,
        )
        summary = PostProvisionReporter().summarize(plan, results)

        assert [e.name for e in summary.endpoints] == ["Kibana"]
        assert summary.credentials == []

    def test_failed_step_has_no_endpoints(self, plan):
        results = _results(cluster=StepStatus.SUCCEEDED, ingress=StepStatus.FAILED)
        summary = PostProvisionReporter().summarize(plan, results)
        assert summary.endpoints == []

    def test_basic_summary(self, plan):
        results = _results(cluster=StepStatus.SUCCEEDED, namespaces=StepStatus.SUCCEEDED)
        summary = PostProvisionReporter().summarize(plan, results, basic=True)

        assert summary.variant == BASIC
        assert summary.endpoints == []
        assert any("Install helm" in note for note in summary.notes)
        assert "kubectl get pods -A" in summary.commands

    def test_to_dict(self, plan):
        results = _results(cluster=StepStatus.SUCCEEDED, monitoring=StepStatus.SUCCEEDED)
        data = PostProvisionReporter().summarize(plan, results).to_dict()

        assert data["variant"] == "full"
        assert data["endpoints"][1] == {
            "name": "Grafana",
            "url": "http://localhost:3000",
            "step": "monitoring",
            "credentials": "admin/admin",
        }
