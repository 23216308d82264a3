"""
Raffle errors.

Every error is raised synchronously at the operation whose precondition was
violated. None of them is retried by the raffle itself.
"""

from __future__ import annotations

from typing import Optional


class RaffleError(RuntimeError):
    """Base class for all raffle errors."""


class InsufficientFee(RaffleError):
    def __init__(self, amount: int, entrance_fee: int) -> None:
        super().__init__(
            f"InsufficientFee: sent {amount}, entrance fee is {entrance_fee}"
        )
        self.amount = amount
        self.entrance_fee = entrance_fee


class RaffleNotOpen(RaffleError):
    def __init__(self) -> None:
        super().__init__("RaffleNotOpen: entries are closed while calculating")


class UpkeepNotNeeded(RaffleError):
    """Raised by ``perform_upkeep`` when the upkeep predicate is false.

    Carries the state that was checked so a keeper can tell which condition
    failed.
    """

    def __init__(self, balance: int, num_players: int, state: str) -> None:
        super().__init__(
            f"UpkeepNotNeeded: balance={balance} players={num_players} state={state}"
        )
        self.balance = balance
        self.num_players = num_players
        self.state = state


class TransferFailed(RaffleError):
    def __init__(self, recipient: str, amount: int) -> None:
        super().__init__(f"TransferFailed: could not pay {amount} to {recipient}")
        self.recipient = recipient
        self.amount = amount


class UnknownRequest(RaffleError):
    """Raised when a fulfillment does not match the outstanding request."""

    def __init__(self, request_id: int, pending_request_id: Optional[int]) -> None:
        super().__init__(
            f"UnknownRequest: got request {request_id}, "
            f"pending request is {pending_request_id}"
        )
        self.request_id = request_id
        self.pending_request_id = pending_request_id


class InvalidAddress(RaffleError):
    pass


class PlayerIndexError(RaffleError, IndexError):
    def __init__(self, index: int, num_players: int) -> None:
        super().__init__(f"no player at index {index} (players={num_players})")
        self.index = index
        self.num_players = num_players
