from __future__ import annotations

import pytest

from vrf_raffle.accounts import address_from_bytes
from vrf_raffle.config import RaffleConfig
from vrf_raffle.oracle import LocalCoordinator
from vrf_raffle.payout import Vault
from vrf_raffle.raffle import Raffle

START = 1_700_000_000.0


class FakeClock:
    def __init__(self, now: float = START) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def addr(n: int) -> str:
    return address_from_bytes(bytes([n]) * 32)


A, B, C = addr(1), addr(2), addr(3)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def coordinator() -> LocalCoordinator:
    return LocalCoordinator(seed="test-seed")


@pytest.fixture
def vault() -> Vault:
    return Vault()


@pytest.fixture
def config() -> RaffleConfig:
    return RaffleConfig(entrance_fee=1, interval=60)


@pytest.fixture
def raffle(config, coordinator, vault, clock) -> Raffle:
    return Raffle(config, coordinator, vault, clock=clock)
