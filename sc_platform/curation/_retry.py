# sc_platform/curation/_retry.py
# retry wrapper used by every remote call.
# Copyright (c) 2025-2026 SmartCurator contributors
from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

from _logging import log

from ._errors import CredentialExpired, RateLimited, ServerFault, TransientNetworkFault
from ._types import CredentialSource

T = TypeVar("T")


@dataclass
class RetryPolicy:
    budget: int = 3
    default_backoff: float = 1.0
    network_delay: float = 1.0
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any] | None, **kw: Any) -> "RetryPolicy":
        c = dict((cfg or {}).get("curation") or {})
        return cls(
            budget=int(c.get("retry_budget", 3)),
            default_backoff=float(c.get("default_backoff_sec", 1.0)),
            network_delay=float(c.get("network_retry_sec", 1.0)),
            **kw,
        )


def call_with_retries(
    fn: Callable[[], T],
    *,
    credentials: CredentialSource | None = None,
    policy: RetryPolicy | None = None,
    label: str = "call",
) -> T:
    """Run fn with a fresh credential, retrying the recoverable failures.

    Rate limits, server faults and network faults share one budget; an
    expired credential triggers a single forced refresh. Exhausting the
    budget re-raises the last error; everything else propagates as is.
    """
    pol = policy or RetryPolicy()
    retries = 0
    refreshed = False

    while True:
        try:
            if credentials is not None:
                credentials.ensure_valid()
            return fn()
        except (RateLimited, ServerFault) as e:
            if retries >= pol.budget:
                raise
            retries += 1
            wait = e.retry_after if e.retry_after is not None else pol.default_backoff
            log(f"{label}: {e.reason} (status={e.status}), retry {retries}/{pol.budget} in {wait:.1f}s",
                level="WARN", module="RETRY")
            pol.sleep(max(0.0, float(wait)))
        except TransientNetworkFault as e:
            if retries >= pol.budget:
                raise
            retries += 1
            log(f"{label}: network fault ({e}), retry {retries}/{pol.budget} in {pol.network_delay:.1f}s",
                level="WARN", module="RETRY")
            pol.sleep(pol.network_delay)
        except CredentialExpired:
            if refreshed or credentials is None:
                raise
            refreshed = True
            log(f"{label}: credential expired, forcing refresh", level="WARN", module="RETRY")
            credentials.force_refresh()
