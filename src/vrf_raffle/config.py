from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .project_constants import (
    CALLBACK_GAS_LIMIT,
    ENTRANCE_FEE,
    INTERVAL_S,
    KEY_HASH,
    NATIVE_PAYMENT,
    NUM_WORDS,
    REQUEST_CONFIRMATIONS,
    SUBSCRIPTION_ID,
)

_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class RaffleConfig:
    """Immutable parameters fixed when a raffle is constructed."""

    entrance_fee: int = ENTRANCE_FEE
    interval: int = INTERVAL_S
    key_hash: str = KEY_HASH
    subscription_id: int = SUBSCRIPTION_ID
    request_confirmations: int = REQUEST_CONFIRMATIONS
    callback_gas_limit: int = CALLBACK_GAS_LIMIT
    num_words: int = NUM_WORDS
    native_payment: bool = NATIVE_PAYMENT
    coordinator_url: Optional[str] = None

    def __post_init__(self) -> None:
        if self.entrance_fee < 0:
            raise RuntimeError("entrance_fee must be >= 0")
        if self.interval < 0:
            raise RuntimeError("interval must be >= 0")
        if self.num_words < 1:
            raise RuntimeError("num_words must be >= 1")
        if self.callback_gas_limit <= 0:
            raise RuntimeError("callback_gas_limit must be > 0")
        if self.request_confirmations < 0:
            raise RuntimeError("request_confirmations must be >= 0")
        raw = self.key_hash[2:] if self.key_hash.startswith("0x") else self.key_hash
        try:
            key = bytes.fromhex(raw)
        except ValueError:
            raise RuntimeError(f"key_hash is not hex: {self.key_hash!r}")
        if len(key) != 32:
            raise RuntimeError("key_hash must be 32 bytes")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw, 0)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    raffle: RaffleConfig

    @staticmethod
    def from_env(
        entrance_fee_override: int | None = None,
        interval_override: int | None = None,
        coordinator_url_override: str | None = None,
    ) -> "Settings":
        load_dotenv()

        entrance_fee = _env_int("RAFFLE_ENTRANCE_FEE", ENTRANCE_FEE)
        if entrance_fee_override is not None:
            entrance_fee = entrance_fee_override

        interval = _env_int("RAFFLE_INTERVAL", INTERVAL_S)
        if interval_override is not None:
            interval = interval_override

        # --coordinator-url wins over VRF_COORDINATOR_URL; neither is required
        # for local simulation.
        coordinator_url = coordinator_url_override or (
            os.getenv("VRF_COORDINATOR_URL", "").strip() or None
        )

        return Settings(
            raffle=RaffleConfig(
                entrance_fee=entrance_fee,
                interval=interval,
                key_hash=os.getenv("VRF_KEY_HASH", "").strip() or KEY_HASH,
                subscription_id=_env_int("VRF_SUBSCRIPTION_ID", SUBSCRIPTION_ID),
                request_confirmations=_env_int(
                    "VRF_REQUEST_CONFIRMATIONS", REQUEST_CONFIRMATIONS
                ),
                callback_gas_limit=_env_int(
                    "VRF_CALLBACK_GAS_LIMIT", CALLBACK_GAS_LIMIT
                ),
                num_words=_env_int("VRF_NUM_WORDS", NUM_WORDS),
                native_payment=os.getenv("VRF_NATIVE_PAYMENT", "").strip().lower()
                in _TRUE,
                coordinator_url=coordinator_url,
            )
        )
