"""Collateral bookkeeping: deposits, withdrawals, locks, liquidations and queries."""

from __future__ import annotations

from typing import Any, Optional

from . import errors
from .deps import Deps, MessageInfo, Response, WasmExecuteMsg
from .messages import BorrowerResponse, BorrowersResponse, Cw20Send, Cw20Transfer, ExecuteBid, to_binary
from .state import (
    BorrowerInfo,
    Config,
    read_borrower_info,
    read_borrowers,
    read_config,
    remove_borrower_info,
    store_borrower_info,
)


def _check_amount(amount: int) -> int:
    value = int(amount)
    if value < 0:
        raise errors.StdError("Invalid amount: must not be negative")
    return value


def _load_borrower(deps: Deps, borrower: str) -> tuple[bytes, BorrowerInfo]:
    raw = deps.api.addr_canonicalize(borrower)
    return raw, read_borrower_info(deps.storage, raw)


def _overseer_request(
    deps: Deps, info: MessageInfo, borrower: str, amount: int
) -> tuple[Config, bytes, BorrowerInfo, int]:
    """Check that the overseer sent the request and load what it acts on."""
    config = read_config(deps.storage)
    if deps.api.addr_canonicalize(info.sender) != config.overseer_contract:
        raise errors.Unauthorized()
    amount = _check_amount(amount)
    raw, borrower_info = _load_borrower(deps, borrower)
    return config, raw, borrower_info, amount


def _locked(borrower_info: BorrowerInfo) -> int:
    return borrower_info.balance - borrower_info.spendable


def _response(action: str, *attributes: tuple[str, Any], message: Any = None) -> Response:
    response = Response()
    if message is not None:
        response.add_message(message)
    response.add_attribute("action", action)
    for key, value in attributes:
        response.add_attribute(key, value)
    return response


def deposit_collateral(deps: Deps, borrower: str, amount: int) -> Response:
    """Add newly received collateral to the borrower's balance and spendable amount."""
    amount = _check_amount(amount)
    raw, borrower_info = _load_borrower(deps, borrower)
    borrower_info.balance += amount
    borrower_info.spendable += amount
    store_borrower_info(deps.storage, raw, borrower_info)
    return _response("deposit_collateral", ("borrower", borrower), ("amount", amount))


def withdraw_collateral(deps: Deps, info: MessageInfo, amount: Optional[int] = None) -> Response:
    """Send spendable collateral back to the sender; all of it when no amount is given."""
    config = read_config(deps.storage)
    borrower = info.sender
    raw, borrower_info = _load_borrower(deps, borrower)

    amount = borrower_info.spendable if amount is None else _check_amount(amount)
    if borrower_info.spendable < amount:
        raise errors.WithdrawAmountExceedsSpendable(borrower_info.spendable)

    borrower_info.balance -= amount
    borrower_info.spendable -= amount
    if borrower_info.balance == 0:
        remove_borrower_info(deps.storage, raw)
    else:
        store_borrower_info(deps.storage, raw, borrower_info)

    transfer = WasmExecuteMsg(
        contract_addr=deps.api.addr_humanize(config.collateral_token),
        msg=to_binary(Cw20Transfer(recipient=borrower, amount=amount)),
    )
    return _response(
        "withdraw_collateral", ("borrower", borrower), ("amount", amount), message=transfer
    )


def lock_collateral(deps: Deps, info: MessageInfo, borrower: str, amount: int) -> Response:
    """Move collateral out of the spendable amount; only the overseer may do this."""
    _, raw, borrower_info, amount = _overseer_request(deps, info, borrower, amount)
    if amount > borrower_info.spendable:
        raise errors.LockAmountExceedsSpendable(borrower_info.spendable)

    borrower_info.spendable -= amount
    store_borrower_info(deps.storage, raw, borrower_info)
    return _response("lock_collateral", ("borrower", borrower), ("amount", amount))


def unlock_collateral(deps: Deps, info: MessageInfo, borrower: str, amount: int) -> Response:
    """Return locked collateral to the spendable amount; only the overseer may do this."""
    _, raw, borrower_info, amount = _overseer_request(deps, info, borrower, amount)
    locked = _locked(borrower_info)
    if amount > locked:
        raise errors.UnlockAmountExceedsLocked(locked)

    borrower_info.spendable += amount
    store_borrower_info(deps.storage, raw, borrower_info)
    return _response("unlock_collateral", ("borrower", borrower), ("amount", amount))


def liquidate_collateral(
    deps: Deps, info: MessageInfo, liquidator: str, borrower: str, amount: int
) -> Response:
    """Send locked collateral to the liquidation contract as a bid execution."""
    config, raw, borrower_info, amount = _overseer_request(deps, info, borrower, amount)
    locked = _locked(borrower_info)
    if amount > locked:
        raise errors.LiquidationAmountExceedsLocked(locked)

    borrower_info.balance -= amount
    store_borrower_info(deps.storage, raw, borrower_info)

    humanize = deps.api.addr_humanize
    bid = ExecuteBid(
        liquidator=liquidator,
        fee_address=humanize(config.overseer_contract),
        repay_address=humanize(config.market_contract),
    )
    send = WasmExecuteMsg(
        contract_addr=humanize(config.collateral_token),
        msg=to_binary(
            Cw20Send(
                contract=humanize(config.liquidation_contract),
                amount=amount,
                msg=to_binary(bid),
            )
        ),
    )
    return _response(
        "liquidate_collateral",
        ("liquidator", liquidator),
        ("borrower", borrower),
        ("amount", amount),
        message=send,
    )


def query_borrower(deps: Deps, borrower: str) -> BorrowerResponse:
    """Report one borrower's collateral; unknown borrowers have zeros."""
    _, borrower_info = _load_borrower(deps, borrower)
    return BorrowerResponse(
        borrower=borrower,
        balance=borrower_info.balance,
        spendable=borrower_info.spendable,
    )


def query_borrowers(
    deps: Deps, start_after: Optional[str] = None, limit: Optional[int] = None
) -> BorrowersResponse:
    """List borrowers page by page in ascending address order."""
    start = None if start_after is None else deps.api.addr_canonicalize(start_after)
    return BorrowersResponse(borrowers=read_borrowers(deps, start, limit))