"""
Retry metadata tracking.

This module defines the RetryMetadata dataclass that captures the complete
retry history of one logical request for audit trails and metrics.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RetryMetadata:
    """
    Complete retry history of one logical request.

    Attached to successful responses and to RetryExhausted / NonRetryableError
    so callers can see what was tried without re-reading the logs.

    Attributes:
        total_attempts: Number of upstream attempts made
        total_latency_ms: Time from first attempt to final outcome (ms)
        decisions: One record per attempt (status, classification, decision fields)
        credentials_used: Masked credential ids in the order they were used
    """

    total_attempts: int
    total_latency_ms: int
    decisions: list[dict] = field(default_factory=list)
    credentials_used: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate metadata invariants."""
        if self.total_attempts < 1:
            raise ValueError("total_attempts must be >= 1")

        if self.total_latency_ms < 0:
            raise ValueError("total_latency_ms must be >= 0")

        if len(self.decisions) != self.total_attempts:
            raise ValueError(
                f"decisions has {len(self.decisions)} entries, expected {self.total_attempts}"
            )

    @property
    def rotations(self) -> int:
        """Number of attempts whose decision asked for a credential rotation."""
        return sum(1 for d in self.decisions if d.get("rotate_credential"))
