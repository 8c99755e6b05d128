from __future__ import annotations

from dataclasses import dataclass

from broker.config import PERSISTENCE_KINDS


@dataclass
class StartupProfile:
    role: str
    host: str
    port: int

    def problems(self) -> list[str]:
        found = []
        if not str(self.host or "").strip():
            found.append("host is required")
        if not 1 <= int(self.port) <= 65535:
            found.append(f"{self.role} port {self.port} must be in range 1..65535")
        return found


def validate_broker_profile(profile: StartupProfile, persistence: str, data_dir: str) -> None:
    """Raise ValueError listing every problem with the broker's startup settings."""
    problems = profile.problems()
    if persistence not in PERSISTENCE_KINDS:
        problems.append(f"persistence must be one of {', '.join(PERSISTENCE_KINDS)}, got '{persistence}'")
    if not str(data_dir or "").strip():
        problems.append("data_dir is required for broker service")
    if problems:
        raise ValueError("; ".join(problems))
