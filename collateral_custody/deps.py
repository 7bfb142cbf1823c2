"""Execution environment: addresses, storage, bank and tax queries, responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import Iterable, Iterator, Mapping, Optional, Union

from .errors import StdError

MOCK_CONTRACT_ADDR = "cosmos2contract"

_MIN_ADDRESS_LENGTH = 3
_MAX_ADDRESS_LENGTH = 64


@dataclass(frozen=True)
class Coin:
    """An amount of a native denomination."""

    denom: str
    amount: int


class ReplyOn(Enum):
    """When a submessage reports back to the contract."""

    ALWAYS = "always"
    ERROR = "error"
    SUCCESS = "success"
    NEVER = "never"


@dataclass
class WasmExecuteMsg:
    """A call to another contract."""

    contract_addr: str
    msg: bytes
    funds: list[Coin] = field(default_factory=list)


@dataclass
class BankSendMsg:
    """A transfer of native coins."""

    to_address: str
    amount: list[Coin] = field(default_factory=list)


@dataclass
class SwapMsg:
    """A market swap of one native coin into another denomination."""

    offer_coin: Coin
    ask_denom: str


@dataclass
class SubMsg:
    """A message dispatched after execution, optionally with a reply."""

    msg: Union[WasmExecuteMsg, BankSendMsg, SwapMsg]
    id: int = 0
    reply_on: ReplyOn = ReplyOn.NEVER


@dataclass
class Response:
    """The outcome of a contract call: messages to dispatch and event attributes."""

    messages: list[SubMsg] = field(default_factory=list)
    attributes: list[tuple[str, str]] = field(default_factory=list)

    def add_attribute(self, key: str, value: object) -> "Response":
        self.attributes.append((key, str(value)))
        return self

    def add_message(self, message: Union[WasmExecuteMsg, BankSendMsg, SwapMsg]) -> "Response":
        self.messages.append(SubMsg(message))
        return self

    def add_submessage(self, submsg: SubMsg) -> "Response":
        self.messages.append(submsg)
        return self


class Api:
    """Address handling: human readable strings against canonical bytes."""

    def addr_validate(self, address: str) -> str:
        canonical = self.addr_canonicalize(address)
        if self.addr_humanize(canonical) != address:
            raise StdError("Invalid input: address not normalized")
        return address

    def addr_canonicalize(self, address: str) -> bytes:
        if not isinstance(address, str):
            raise StdError("Invalid input: address must be a string")
        if len(address) < _MIN_ADDRESS_LENGTH:
            raise StdError("Invalid input: human address too short")
        if len(address) > _MAX_ADDRESS_LENGTH:
            raise StdError("Invalid input: human address too long")
        return address.lower().encode("utf-8")

    def addr_humanize(self, canonical: bytes) -> str:
        raw = bytes(canonical)
        if not _MIN_ADDRESS_LENGTH <= len(raw) <= _MAX_ADDRESS_LENGTH:
            raise StdError("Invalid input: canonical address length not correct")
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise StdError("Invalid input: canonical address is not valid UTF-8") from exc


class Storage:
    """An ordered key-value store of bytes."""

    def __init__(self) -> None:
        self._data: dict[bytes, bytes] = {}

    def get(self, key: bytes) -> Optional[bytes]:
        return self._data.get(bytes(key))

    def set(self, key: bytes, value: bytes) -> None:
        self._data[bytes(key)] = bytes(value)

    def remove(self, key: bytes) -> None:
        self._data.pop(bytes(key), None)

    def range(
        self, start: Optional[bytes] = None, end: Optional[bytes] = None
    ) -> Iterator[tuple[bytes, bytes]]:
        """Yield entries in ascending key order, from start inclusive to end exclusive."""
        for key, value in sorted(self._data.items()):
            if start is not None and key < start:
                continue
            if end is not None and key >= end:
                break
            yield key, value


class Querier:
    """Answers bank, reward and tax queries from configured values."""

    def __init__(self) -> None:
        self._balances: dict[str, dict[str, int]] = {}
        self._accrued_rewards: dict[str, int] = {}
        self._tax_rate = Fraction(0)
        self._tax_caps: dict[str, int] = {}

    def set_balances(self, address: str, coins: Iterable[Coin]) -> None:
        self._balances[address] = {coin.denom: coin.amount for coin in coins}

    def set_accrued_rewards(self, address: str, rewards: int) -> None:
        self._accrued_rewards[address] = int(rewards)

    def set_tax(self, rate: Union[Decimal, Fraction, int, str, float], caps: Mapping[str, int]) -> None:
        rate_value = Fraction(str(rate)) if isinstance(rate, float) else Fraction(rate)
        if rate_value < 0:
            raise ValueError("tax rate cannot be negative")
        self._tax_rate = rate_value
        self._tax_caps = {denom: int(cap) for denom, cap in caps.items()}

    def query_balance(self, address: str, denom: str) -> int:
        return self._balances.get(address, {}).get(denom, 0)

    def query_all_balances(self, address: str) -> list[Coin]:
        return [Coin(denom, amount) for denom, amount in self._balances.get(address, {}).items()]

    def query_accrued_rewards(self, reward_contract: str, address: str) -> int:
        return self._accrued_rewards.get(address, 0)

    def deduct_tax(self, coin: Coin) -> Coin:
        """Return the coin reduced by the tax charged on sending it."""
        after_tax = Fraction(coin.amount) // (1 + self._tax_rate)
        tax = min(coin.amount - after_tax, self._tax_caps.get(coin.denom, 0))
        return Coin(coin.denom, coin.amount - tax)


@dataclass
class Deps:
    """Everything a contract call may read or change."""

    storage: Storage = field(default_factory=Storage)
    api: Api = field(default_factory=Api)
    querier: Querier = field(default_factory=Querier)


@dataclass
class MessageInfo:
    """Who sent the call and which coins came with it."""

    sender: str
    funds: list[Coin] = field(default_factory=list)


@dataclass
class Env:
    """The contract's own environment."""

    contract_address: str = MOCK_CONTRACT_ADDR