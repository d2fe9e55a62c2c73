"""Shared protocol definitions."""

from typing import Protocol


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard)."""

    def log_forward(
        self,
        method: str,
        target: str,
        headers: dict[str, str],
        *,
        name: str,
    ) -> None: ...
    def log_passthrough(self, method: str, path: str) -> None: ...
    def log_relay(self, target: str, status: int) -> None: ...
    def log_error(self, target: str, status: int, message: str) -> None: ...
