"""Entry points of the plain custody contract, which pays out no rewards."""

from __future__ import annotations

from typing import Any, Optional

from .collateral import (
    deposit_collateral,
    liquidate_collateral,
    lock_collateral,
    query_borrower,
    query_borrowers,
    unlock_collateral,
    withdraw_collateral,
)
from .deps import Api, Deps, Env, MessageInfo, Response
from .errors import MissingDepositCollateralHook, StdError, Unauthorized
from .messages import (
    BorrowerQuery,
    BorrowersQuery,
    ConfigQuery,
    ConfigResponse,
    Cw20ReceiveMsg,
    DistributeRewards,
    InstantiateMsg,
    LiquidateCollateral,
    LockCollateral,
    MigrateMsg,
    Receive,
    UnlockCollateral,
    UpdateConfig,
    WithdrawCollateral,
    parse_cw20_hook,
    to_binary,
)
from .state import Config, read_config, store_config

CLAIM_REWARDS_OPERATION = 1
SWAP_TO_STABLE_OPERATION = 2


def _optional_addr_validate(api: Api, address: Optional[str]) -> Optional[str]:
    return None if address is None else api.addr_validate(address)


def instantiate(deps: Deps, env: Env, info: MessageInfo, msg: InstantiateMsg) -> Response:
    """Store the initial configuration."""
    api = deps.api
    config = Config(
        owner=api.addr_canonicalize(msg.owner),
        collateral_token=api.addr_canonicalize(msg.collateral_token),
        overseer_contract=api.addr_canonicalize(msg.overseer_contract),
        market_contract=api.addr_canonicalize(msg.market_contract),
        reward_contract=api.addr_canonicalize(msg.reward_contract),
        liquidation_contract=api.addr_canonicalize(msg.liquidation_contract),
        stable_denom=msg.stable_denom,
        basset_info=msg.basset_info,
    )
    store_config(deps.storage, config)
    return Response()


def execute(deps: Deps, env: Env, info: MessageInfo, msg: Any) -> Response:
    """Dispatch an execute message to its handler."""
    api = deps.api
    match msg:
        case Receive(msg=cw20_msg):
            return receive_cw20(deps, info, cw20_msg)
        case UpdateConfig(owner=owner, liquidation_contract=liquidation_contract):
            return update_config(
                deps,
                info,
                _optional_addr_validate(api, owner),
                _optional_addr_validate(api, liquidation_contract),
            )
        case LockCollateral(borrower=borrower, amount=amount):
            return lock_collateral(deps, info, api.addr_validate(borrower), amount)
        case UnlockCollateral(borrower=borrower, amount=amount):
            return unlock_collateral(deps, info, api.addr_validate(borrower), amount)
        case DistributeRewards():
            return Response()
        case WithdrawCollateral(amount=amount):
            return withdraw_collateral(deps, info, amount)
        case LiquidateCollateral(liquidator=liquidator, borrower=borrower, amount=amount):
            liquidator_addr = api.addr_validate(liquidator)
            borrower_addr = api.addr_validate(borrower)
            return liquidate_collateral(deps, info, liquidator_addr, borrower_addr, amount)
    raise StdError(f"Unknown execute message: {type(msg).__name__}")


def receive_cw20(deps: Deps, info: MessageInfo, cw20_msg: Cw20ReceiveMsg) -> Response:
    """Accept a token transfer carrying the deposit hook from the collateral token."""
    try:
        parse_cw20_hook(cw20_msg.msg)
    except StdError as exc:
        raise MissingDepositCollateralHook() from exc

    config = read_config(deps.storage)
    if deps.api.addr_canonicalize(info.sender) != config.collateral_token:
        raise Unauthorized()

    sender = deps.api.addr_validate(cw20_msg.sender)
    return deposit_collateral(deps, sender, cw20_msg.amount)


def update_config(
    deps: Deps,
    info: MessageInfo,
    owner: Optional[str] = None,
    liquidation_contract: Optional[str] = None,
) -> Response:
    """Change the owner and/or the liquidation contract; only the owner may do this."""
    config = read_config(deps.storage)
    if deps.api.addr_canonicalize(info.sender) != config.owner:
        raise Unauthorized()

    if owner is not None:
        config.owner = deps.api.addr_canonicalize(owner)
    if liquidation_contract is not None:
        config.liquidation_contract = deps.api.addr_canonicalize(liquidation_contract)

    store_config(deps.storage, config)
    return Response().add_attribute("action", "update_config")


def query(deps: Deps, env: Env, msg: Any) -> bytes:
    """Answer a query with its JSON-encoded response."""
    match msg:
        case ConfigQuery():
            return to_binary(query_config(deps))
        case BorrowerQuery(address=address):
            return to_binary(query_borrower(deps, deps.api.addr_validate(address)))
        case BorrowersQuery(start_after=start_after, limit=limit):
            return to_binary(
                query_borrowers(deps, _optional_addr_validate(deps.api, start_after), limit)
            )
    raise StdError(f"Unknown query message: {type(msg).__name__}")


def query_config(deps: Deps) -> ConfigResponse:
    """Report the configuration with human readable addresses."""
    config = read_config(deps.storage)
    humanize = deps.api.addr_humanize
    return ConfigResponse(
        owner=humanize(config.owner),
        collateral_token=humanize(config.collateral_token),
        overseer_contract=humanize(config.overseer_contract),
        market_contract=humanize(config.market_contract),
        reward_contract=humanize(config.reward_contract),
        liquidation_contract=humanize(config.liquidation_contract),
        stable_denom=config.stable_denom,
        basset_info=config.basset_info,
    )


def migrate(deps: Deps, env: Env, msg: MigrateMsg) -> Response:
    """Nothing changes on migration."""
    return Response()