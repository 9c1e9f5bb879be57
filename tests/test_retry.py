# SmartCurator test scripts
from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from sc_platform.curation import (
    CredentialExpired,
    RateLimited,
    RemoteCallError,
    RetryPolicy,
    ServerFault,
    TransientNetworkFault,
    call_with_retries,
)


@dataclass
class FakeCreds:
    ensured: int = 0
    refreshed: int = 0

    def ensure_valid(self) -> str:
        self.ensured += 1
        return "tok"

    def force_refresh(self) -> str:
        self.refreshed += 1
        return "tok2"


@dataclass
class Flaky:
    errors: list[Exception] = field(default_factory=list)
    calls: int = 0
    always: Exception | None = None

    def __call__(self) -> str:
        self.calls += 1
        if self.always is not None:
            raise self.always
        if self.errors:
            raise self.errors.pop(0)
        return "ok"


def _policy(sleeps: list[float], budget: int = 3) -> RetryPolicy:
    return RetryPolicy(budget=budget, default_backoff=1.5, network_delay=0.25, sleep=sleeps.append)


def test_rate_limit_exhausts_budget() -> None:
    sleeps: list[float] = []
    fn = Flaky(always=RateLimited("slow down", status=429, retry_after=2.0))

    with pytest.raises(RateLimited):
        call_with_retries(fn, policy=_policy(sleeps))

    assert fn.calls == 4
    assert sleeps == [2.0, 2.0, 2.0]


def test_server_fault_without_retry_after_uses_default_backoff() -> None:
    sleeps: list[float] = []
    fn = Flaky(errors=[ServerFault("boom", status=503)])

    assert call_with_retries(fn, policy=_policy(sleeps)) == "ok"
    assert sleeps == [1.5]


def test_network_faults_share_the_budget() -> None:
    sleeps: list[float] = []
    fn = Flaky(errors=[
        TransientNetworkFault("reset"),
        RateLimited("429", status=429, retry_after=0.5),
        TransientNetworkFault("timeout"),
    ])

    with pytest.raises(TransientNetworkFault):
        call_with_retries(fn, policy=_policy(sleeps, budget=2))

    assert fn.calls == 3
    assert sleeps == [0.25, 0.5]


def test_expired_credential_refreshes_once() -> None:
    creds = FakeCreds()
    fn = Flaky(errors=[CredentialExpired("401", status=401)])

    assert call_with_retries(fn, credentials=creds, policy=_policy([])) == "ok"
    assert creds.refreshed == 1
    assert creds.ensured == 2


def test_second_expiry_propagates() -> None:
    creds = FakeCreds()
    fn = Flaky(always=CredentialExpired("401", status=401))

    with pytest.raises(CredentialExpired):
        call_with_retries(fn, credentials=creds, policy=_policy([]))

    assert creds.refreshed == 1
    assert fn.calls == 2


def test_expiry_without_credentials_propagates() -> None:
    with pytest.raises(CredentialExpired):
        call_with_retries(Flaky(always=CredentialExpired("401")), policy=_policy([]))


def test_other_errors_are_not_retried() -> None:
    sleeps: list[float] = []
    fn = Flaky(always=RemoteCallError("not found", status=404))

    with pytest.raises(RemoteCallError):
        call_with_retries(fn, policy=_policy(sleeps))

    assert fn.calls == 1
    assert sleeps == []


def test_policy_from_config() -> None:
    pol = RetryPolicy.from_config({"curation": {"retry_budget": 5, "default_backoff_sec": 2, "network_retry_sec": 3}})
    assert (pol.budget, pol.default_backoff, pol.network_delay) == (5, 2.0, 3.0)
    assert RetryPolicy.from_config(None).budget == 3
