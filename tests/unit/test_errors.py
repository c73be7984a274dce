"""Unit tests for the bootstrap error taxonomy."""

from k3d_manager.bootstrap import (
    BootstrapError,
    ClusterCreateError,
    FallbackExhausted,
    ReadinessTimeoutError,
    StepActionError,
)


class TestBootstrapError:
    """Tests for BootstrapError and subclasses."""

    def test_str_includes_step(self):
        error = StepActionError("helm failed", step="ingress")
        assert str(error) == "[ingress] helm failed"

    def test_str_without_step(self):
        assert str(BootstrapError("boom")) == "boom"

    def test_subclasses_are_catchable_as_base(self):
        for cls in (ClusterCreateError, StepActionError, ReadinessTimeoutError, FallbackExhausted):
            assert issubclass(cls, BootstrapError)
            assert issubclass(cls, Exception)

    def test_kinds_are_distinct(self):
        kinds = {
            cls.kind
            for cls in (ClusterCreateError, StepActionError, ReadinessTimeoutError, FallbackExhausted)
        }
        assert len(kinds) == 4

    def test_to_dict(self):
        error = ReadinessTimeoutError(
            "0/1 pods ready",
            step="ingress",
            data={"namespace": "ingress-nginx"},
        )
        assert error.to_dict() == {
            "kind": "readiness_timeout",
            "message": "0/1 pods ready",
            "step": "ingress",
            "data": {"namespace": "ingress-nginx"},
        }

    def test_to_dict_omits_empty_fields(self):
        assert BootstrapError("x").to_dict() == {"kind": "bootstrap_error", "message": "x"}
