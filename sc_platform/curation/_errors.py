# sc_platform/curation/_errors.py
# error taxonomy for the curation engine.
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

from typing import Any


class CurationError(RuntimeError):
    reason = "error"


class ValidationFault(CurationError):
    reason = "validation"

    def __init__(self, message: str, issues: list[str] | None = None) -> None:
        super().__init__(message)
        self.issues = list(issues or [])


class RemoteCallError(CurationError):
    reason = "remote_error"

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        retry_after: float | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.retry_after = retry_after
        self.body = body


class RateLimited(RemoteCallError):
    reason = "rate_limited"


class ServerFault(RemoteCallError):
    reason = "server_error"


class CredentialExpired(RemoteCallError):
    reason = "credential_expired"


class TransientNetworkFault(RemoteCallError):
    reason = "network"


class ConsistencyFault(CurationError):
    reason = "consistency"


class UpstreamServiceFault(CurationError):
    reason = "upstream_service"


class CriticalAuthFault(CurationError):
    reason = "critical_auth"

    def __init__(self, message: str, *, owner: str | None = None) -> None:
        super().__init__(message)
        self.owner = owner


def failure_reason(exc: BaseException) -> str:
    return getattr(exc, "reason", None) or "error"


__all__ = [
    "CurationError",
    "ValidationFault",
    "RemoteCallError",
    "RateLimited",
    "ServerFault",
    "CredentialExpired",
    "TransientNetworkFault",
    "ConsistencyFault",
    "UpstreamServiceFault",
    "CriticalAuthFault",
    "failure_reason",
]
