"""
Health probe logic for liveness and readiness checks.

Liveness  (/health/live)  - is the process running?
Readiness (/health/ready) - can it mix? (pattern valid + providers reachable)
"""

import time
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class CheckResult:
    healthy: bool
    message: str
    details: Optional[Dict] = field(default=None)


class HealthChecker:
    """Liveness and readiness health checks for one ContentMixer."""

    def __init__(self, mixer):
        self.mixer = mixer
        self.start_time = time.time()

    def liveness(self) -> CheckResult:
        """Liveness probe - always 200 if the process is alive."""
        return CheckResult(
            healthy=True,
            message="Process is running",
            details={"uptime_seconds": round(time.time() - self.start_time, 1)},
        )

    def readiness(self) -> CheckResult:
        """Readiness probe - 200 only when the pattern is servable."""
        checks: Dict[str, Dict] = {}
        all_ok = True

        for name, check in (("pattern", self._check_pattern), ("providers", self._check_providers)):
            try:
                result = check()
                checks[name] = result.__dict__
                if not result.healthy:
                    all_ok = False
            except Exception as exc:
                checks[name] = {"healthy": False, "message": str(exc)}
                all_ok = False

        return CheckResult(
            healthy=all_ok,
            message="All checks passed" if all_ok else "One or more checks failed",
            details=checks,
        )

    # ------------------------------------------------------------------
    # Individual checks
    # ------------------------------------------------------------------

    def _check_pattern(self) -> CheckResult:
        problems = self.mixer.validate()
        if problems:
            return CheckResult(healthy=False, message="; ".join(problems))
        return CheckResult(
            healthy=True,
            message=f"Pattern of {len(self.mixer.pattern)} entries",
        )

    def _check_providers(self) -> CheckResult:
        """At least one provider referenced by the pattern must be available."""
        ids = []
        for config in self.mixer.pattern:
            for pid in (config.provider_id, config.fallback_id):
                if pid is not None and pid not in ids:
                    ids.append(pid)

        status = {}
        for pid in ids:
            provider = self.mixer.clients.get(pid)
            status[pid] = bool(provider is not None and provider.is_available())

        available = [pid for pid, ok in status.items() if ok]
        if not available:
            return CheckResult(healthy=False, message="No content providers available", details=status)
        return CheckResult(
            healthy=True,
            message=f"{len(available)}/{len(ids)} provider(s) available",
            details=status,
        )
