"""Persistent state: configuration and per-borrower collateral."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from itertools import islice
from typing import Any, Optional

from .deps import Deps, Storage
from .errors import StdError
from .messages import BAssetInfo, BorrowerResponse

MAX_LIMIT = 30
DEFAULT_LIMIT = 10


def _length_prefixed(namespace: bytes) -> bytes:
    return len(namespace).to_bytes(2, "big") + namespace


def _prefix_end(prefix: bytes) -> bytes:
    data = bytearray(prefix)
    while data and data[-1] == 0xFF:
        data.pop()
    data[-1] += 1
    return bytes(data)


_CONFIG_KEY = _length_prefixed(b"config")
_BORROWER_PREFIX = _length_prefixed(b"borrower")
_BORROWER_END = _prefix_end(_BORROWER_PREFIX)

_ADDRESS_FIELDS = (
    "owner",
    "collateral_token",
    "overseer_contract",
    "market_contract",
    "reward_contract",
    "liquidation_contract",
)


@dataclass
class Config:
    owner: bytes
    collateral_token: bytes
    overseer_contract: bytes
    market_contract: bytes
    reward_contract: bytes
    liquidation_contract: bytes
    stable_denom: str
    basset_info: BAssetInfo


@dataclass
class BorrowerInfo:
    balance: int = 0
    spendable: int = 0


def _dump(data: Any) -> bytes:
    return json.dumps(data, separators=(",", ":")).encode("utf-8")


def store_config(storage: Storage, config: Config) -> None:
    data: dict[str, Any] = {
        name: base64.b64encode(getattr(config, name)).decode("ascii") for name in _ADDRESS_FIELDS
    }
    data["stable_denom"] = config.stable_denom
    data["basset_info"] = {
        "name": config.basset_info.name,
        "symbol": config.basset_info.symbol,
        "decimals": config.basset_info.decimals,
    }
    storage.set(_CONFIG_KEY, _dump(data))


def read_config(storage: Storage) -> Config:
    raw = storage.get(_CONFIG_KEY)
    if raw is None:
        raise StdError("Config not found")
    try:
        data = json.loads(raw)
        addresses = {name: base64.b64decode(data[name], validate=True) for name in _ADDRESS_FIELDS}
        info = data["basset_info"]
        return Config(
            **addresses,
            stable_denom=data["stable_denom"],
            basset_info=BAssetInfo(info["name"], info["symbol"], info["decimals"]),
        )
    except (ValueError, KeyError, TypeError, binascii.Error) as exc:
        raise StdError(f"Error parsing into type Config: {exc}") from exc


def store_borrower_info(storage: Storage, borrower: bytes, info: BorrowerInfo) -> None:
    storage.set(
        _BORROWER_PREFIX + bytes(borrower),
        _dump({"balance": str(info.balance), "spendable": str(info.spendable)}),
    )


def remove_borrower_info(storage: Storage, borrower: bytes) -> None:
    storage.remove(_BORROWER_PREFIX + bytes(borrower))


def _parse_borrower_info(raw: bytes) -> BorrowerInfo:
    try:
        data = json.loads(raw)
        return BorrowerInfo(balance=int(data["balance"]), spendable=int(data["spendable"]))
    except (ValueError, KeyError, TypeError) as exc:
        raise StdError(f"Error parsing into type BorrowerInfo: {exc}") from exc


def read_borrower_info(storage: Storage, borrower: bytes) -> BorrowerInfo:
    """Return the borrower's collateral, or zeros when nothing readable is stored."""
    raw = storage.get(_BORROWER_PREFIX + bytes(borrower))
    if raw is None:
        return BorrowerInfo()
    try:
        return _parse_borrower_info(raw)
    except StdError:
        return BorrowerInfo()


def read_borrowers(
    deps: Deps, start_after: Optional[bytes] = None, limit: Optional[int] = None
) -> list[BorrowerResponse]:
    """List borrowers in ascending canonical order after an optional starting address."""
    count = min(DEFAULT_LIMIT if limit is None else limit, MAX_LIMIT)
    start = _BORROWER_PREFIX
    if start_after is not None:
        start += bytes(start_after) + b"\x01"
    entries = islice(deps.storage.range(start, _BORROWER_END), max(count, 0))
    result = []
    for key, raw in entries:
        info = _parse_borrower_info(raw)
        result.append(
            BorrowerResponse(
                borrower=deps.api.addr_humanize(key[len(_BORROWER_PREFIX):]),
                balance=info.balance,
                spendable=info.spendable,
            )
        )
    return result