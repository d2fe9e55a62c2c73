"""Forwarding decision - pass through or replay against the trigger's URL."""

from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True)
class ForwardDecision:
    """Forwarding decision for a request."""

    target: str | None = None

    @property
    def should_forward(self) -> bool:
        return bool(self.target)


class ForwardDecider:
    """Decide whether a request should be forwarded, and where."""

    def __init__(self, trigger_header: str = "Location"):
        self.trigger_header = trigger_header

    def decide(self, headers: Mapping[str, str]) -> ForwardDecision:
        """Return the target named by the trigger header, if any."""
        target = headers.get(self.trigger_header, "")
        if not target:
            return ForwardDecision()
        return ForwardDecision(target=target)
