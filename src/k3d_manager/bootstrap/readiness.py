"""Readiness polling for pipeline steps.

This module polls observed pod state until every pod matching a selector
reports Ready, or a hard timeout elapses. It never re-runs the action
that created the pods.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..shared.logging import get_logger
from .kubectl import KubectlClient

logger = get_logger(__name__)

# Upper bound on a single `kubectl get` during a wait
KUBECTL_CALL_TIMEOUT = 10.0


@dataclass
class ReadinessResult:
    """Result of a readiness wait."""

    ready: bool
    attempts: int = 0
    elapsed_seconds: float = 0.0
    ready_pods: int = 0
    total_pods: int = 0
    error: str | None = None


class ReadinessPoller:
    """Poll pod readiness through kubectl."""

    def __init__(
        self,
        kubectl: KubectlClient | None = None,
        interval_seconds: float = 5.0,
    ):
        """Initialize readiness poller.

        Args:
            kubectl: Client used to read pod state.
            interval_seconds: Seconds between polls (must be positive).
        """
        if not interval_seconds > 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds!r}")
        self.kubectl = kubectl or KubectlClient()
        self.interval_seconds = interval_seconds

    async def wait_for_ready(
        self,
        selector: str,
        namespace: str,
        timeout_seconds: float,
        on_attempt: Callable[[int, int, int], None] | None = None,
    ) -> ReadinessResult:
        """Poll until all matching pods are Ready or the timeout elapses.

        A selector that matches no pods yet counts as not ready.

        Args:
            selector: Label selector.
            namespace: Namespace to look in.
            timeout_seconds: Hard bound on the wait.
            on_attempt: Optional callback called with (attempt, ready, total)
                       for progress reporting.

        Returns:
            ReadinessResult with status information.
        """
        start = time.monotonic()
        deadline = start + timeout_seconds
        attempt = 0
        ready = total = 0

        while True:
            attempt += 1
            # Each call is bounded by the time left, floored at 1s
            call_timeout = max(min(deadline - time.monotonic(), KUBECTL_CALL_TIMEOUT), 1.0)
            ready, total = await asyncio.to_thread(
                self.kubectl.pods_ready, selector, namespace, timeout=call_timeout
            )
            logger.debug(
                "readiness_poll",
                selector=selector,
                namespace=namespace,
                attempt=attempt,
                ready=ready,
                total=total,
            )

            if on_attempt:
                on_attempt(attempt, ready, total)

            if total > 0 and ready == total:
                return ReadinessResult(
                    ready=True,
                    attempts=attempt,
                    elapsed_seconds=time.monotonic() - start,
                    ready_pods=ready,
                    total_pods=total,
                )

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            await asyncio.sleep(min(self.interval_seconds, remaining))

        return ReadinessResult(
            ready=False,
            attempts=attempt,
            elapsed_seconds=time.monotonic() - start,
            ready_pods=ready,
            total_pods=total,
            error=(
                f"{ready}/{total} pods matching '{selector}' in '{namespace}' "
                f"ready after {timeout_seconds:g}s"
            ),
        )
