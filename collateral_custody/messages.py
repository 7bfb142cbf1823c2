"""Contract messages, responses and their JSON wire form."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import MISSING, dataclass, field, fields, is_dataclass
from typing import Any, ClassVar, Optional

from .errors import StdError

_UINT = "uint"
_BINARY = "binary"


def _uint(**kwargs: Any) -> Any:
    return field(metadata={"wire": _UINT}, **kwargs)


def _binary(**kwargs: Any) -> Any:
    return field(metadata={"wire": _BINARY}, **kwargs)


def _nested(cls: type, many: bool = False, **kwargs: Any) -> Any:
    return field(metadata={"wire": cls, "many": many}, **kwargs)


@dataclass
class BAssetInfo:
    name: str
    symbol: str
    decimals: int


@dataclass
class InstantiateMsg:
    owner: str
    collateral_token: str
    overseer_contract: str
    market_contract: str
    reward_contract: str
    liquidation_contract: str
    stable_denom: str
    basset_info: BAssetInfo = _nested(BAssetInfo)


@dataclass
class MigrateMsg:
    pass


@dataclass
class Cw20ReceiveMsg:
    sender: str
    amount: int = _uint()
    msg: bytes = _binary(default=b"")


@dataclass
class DepositCollateralHook:
    tag: ClassVar[str] = "deposit_collateral"


@dataclass
class Receive:
    tag: ClassVar[str] = "receive"
    newtype: ClassVar[bool] = True
    msg: Cw20ReceiveMsg = _nested(Cw20ReceiveMsg)


@dataclass
class UpdateConfig:
    tag: ClassVar[str] = "update_config"
    owner: Optional[str] = None
    liquidation_contract: Optional[str] = None


@dataclass
class LockCollateral:
    tag: ClassVar[str] = "lock_collateral"
    borrower: str
    amount: int = _uint()


@dataclass
class UnlockCollateral:
    tag: ClassVar[str] = "unlock_collateral"
    borrower: str
    amount: int = _uint()


@dataclass
class DistributeRewards:
    tag: ClassVar[str] = "distribute_rewards"


@dataclass
class WithdrawCollateral:
    tag: ClassVar[str] = "withdraw_collateral"
    amount: Optional[int] = _uint(default=None)


@dataclass
class LiquidateCollateral:
    tag: ClassVar[str] = "liquidate_collateral"
    liquidator: str
    borrower: str
    amount: int = _uint()


@dataclass
class ConfigQuery:
    tag: ClassVar[str] = "config"


@dataclass
class BorrowerQuery:
    tag: ClassVar[str] = "borrower"
    address: str


@dataclass
class BorrowersQuery:
    tag: ClassVar[str] = "borrowers"
    start_after: Optional[str] = None
    limit: Optional[int] = None


@dataclass
class BorrowerResponse:
    borrower: str
    balance: int = _uint()
    spendable: int = _uint()


@dataclass
class BorrowersResponse:
    borrowers: list[BorrowerResponse] = _nested(BorrowerResponse, many=True, default_factory=list)


@dataclass
class ConfigResponse:
    owner: str
    collateral_token: str
    overseer_contract: str
    market_contract: str
    reward_contract: str
    liquidation_contract: str
    stable_denom: str
    basset_info: BAssetInfo = _nested(BAssetInfo)


@dataclass
class Cw20Transfer:
    tag: ClassVar[str] = "transfer"
    recipient: str
    amount: int = _uint()


@dataclass
class Cw20Send:
    tag: ClassVar[str] = "send"
    contract: str
    amount: int = _uint()
    msg: bytes = _binary(default=b"")


@dataclass
class ExecuteBid:
    tag: ClassVar[str] = "execute_bid"
    liquidator: str
    fee_address: Optional[str] = None
    repay_address: Optional[str] = None


@dataclass
class ClaimRewards:
    tag: ClassVar[str] = "claim_rewards"
    recipient: Optional[str] = None


_TAGGED = (
    DepositCollateralHook,
    Receive,
    UpdateConfig,
    LockCollateral,
    UnlockCollateral,
    DistributeRewards,
    WithdrawCollateral,
    LiquidateCollateral,
    ConfigQuery,
    BorrowerQuery,
    BorrowersQuery,
    Cw20Transfer,
    Cw20Send,
    ExecuteBid,
    ClaimRewards,
)
_REGISTRY: dict[str, type] = {cls.tag: cls for cls in _TAGGED}


def _encode_field(f: Any, value: Any) -> Any:
    if value is None:
        return None
    if f.metadata.get("wire") == _UINT:
        return str(int(value))
    return _encode(value)


def _encode(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        struct_fields = fields(value)
        body: Any = {f.name: _encode_field(f, getattr(value, f.name)) for f in struct_fields}
        if getattr(value, "newtype", False):
            body = body[struct_fields[0].name]
        tag = getattr(type(value), "tag", None)
        return {tag: body} if tag else body
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _encode(item) for key, item in value.items()}
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    raise TypeError(f"cannot serialize {type(value).__name__}")


def _decode_field(f: Any, raw: Any) -> Any:
    if raw is None:
        return None
    kind = f.metadata.get("wire")
    if kind == _UINT:
        if not isinstance(raw, str) or not raw.isdigit():
            raise StdError(f"Invalid number for field `{f.name}`: {raw!r}")
        return int(raw)
    if kind == _BINARY:
        if not isinstance(raw, str):
            raise StdError(f"Invalid binary for field `{f.name}`")
        try:
            return base64.b64decode(raw, validate=True)
        except binascii.Error as exc:
            raise StdError(f"Invalid base64 for field `{f.name}`") from exc
    if isinstance(kind, type):
        if f.metadata.get("many"):
            if not isinstance(raw, list):
                raise StdError(f"Expected a list for field `{f.name}`")
            return [_decode_struct(kind, item) for item in raw]
        return _decode_struct(kind, raw)
    return raw


def _decode_struct(cls: type, body: Any) -> Any:
    struct_fields = fields(cls)
    if getattr(cls, "newtype", False):
        return cls(**{struct_fields[0].name: _decode_field(struct_fields[0], body)})
    if not isinstance(body, dict):
        raise StdError(f"Error parsing into type {cls.__name__}: expected an object")
    kwargs = {}
    for f in struct_fields:
        if f.name not in body:
            if f.default is MISSING and f.default_factory is MISSING:
                raise StdError(f"Error parsing into type {cls.__name__}: missing field `{f.name}`")
            continue
        kwargs[f.name] = _decode_field(f, body[f.name])
    return cls(**kwargs)


def to_binary(value: Any) -> bytes:
    """Serialize a message or plain value to compact JSON bytes."""
    return json.dumps(_encode(value), separators=(",", ":")).encode("utf-8")


def from_binary(data: bytes) -> Any:
    """Parse JSON bytes; a known tagged message becomes its class, anything else stays plain."""
    try:
        value = json.loads(bytes(data).decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise StdError(f"Error parsing into type: {exc}") from exc
    if isinstance(value, dict) and len(value) == 1:
        (tag, body), = value.items()
        cls = _REGISTRY.get(tag)
        if cls is not None:
            return _decode_struct(cls, body)
    return value


def parse_cw20_hook(data: bytes) -> DepositCollateralHook:
    """Read the hook message carried by a token transfer."""
    message = from_binary(data)
    if not isinstance(message, DepositCollateralHook):
        raise StdError("Error parsing into type Cw20HookMsg: unknown variant")
    return message