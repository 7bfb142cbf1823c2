"""Reward handling: claim accrued rewards, swap them to the stable denomination, pay the overseer."""

from __future__ import annotations

from .contract import CLAIM_REWARDS_OPERATION, SWAP_TO_STABLE_OPERATION
from .deps import BankSendMsg, Coin, Deps, Env, MessageInfo, ReplyOn, Response, SubMsg, SwapMsg, WasmExecuteMsg
from .errors import Unauthorized
from .messages import ClaimRewards, to_binary
from .state import read_config

# Rewards below this amount are not worth claiming.
REWARDS_THRESHOLD = 1_000_000


def distribute_rewards(deps: Deps, env: Env, info: MessageInfo) -> Response:
    """Ask the reward contract to pay out accrued rewards; only the overseer may do this."""
    config = read_config(deps.storage)
    if config.overseer_contract != deps.api.addr_canonicalize(info.sender):
        raise Unauthorized()

    reward_contract = deps.api.addr_humanize(config.reward_contract)
    accrued = get_accrued_rewards(deps, reward_contract, env.contract_address)
    if accrued < REWARDS_THRESHOLD:
        return Response()

    claim = WasmExecuteMsg(
        contract_addr=reward_contract,
        msg=to_binary(ClaimRewards(recipient=None)),
    )
    return Response().add_submessage(
        SubMsg(claim, id=CLAIM_REWARDS_OPERATION, reply_on=ReplyOn.SUCCESS)
    )


def distribute_hook(deps: Deps, env: Env) -> Response:
    """Send the contract's whole stable balance, less tax, to the overseer."""
    config = read_config(deps.storage)
    overseer = deps.api.addr_humanize(config.overseer_contract)

    reward_amount = deps.querier.query_balance(env.contract_address, config.stable_denom)
    response = Response()
    if reward_amount:
        coin = deps.querier.deduct_tax(Coin(config.stable_denom, reward_amount))
        response.add_message(BankSendMsg(to_address=overseer, amount=[coin]))

    return (
        response.add_attribute("action", "distribute_rewards")
        .add_attribute("buffer_rewards", reward_amount)
    )


def swap_to_stable_denom(deps: Deps, env: Env) -> Response:
    """Swap every non-stable coin held into the stable denomination; the last swap replies."""
    config = read_config(deps.storage)
    balances = deps.querier.query_all_balances(env.contract_address)
    submessages = [
        SubMsg(SwapMsg(offer_coin=coin, ask_denom=config.stable_denom))
        for coin in balances
        if coin.denom != config.stable_denom
    ]
    if submessages:
        submessages[-1].id = SWAP_TO_STABLE_OPERATION
        submessages[-1].reply_on = ReplyOn.SUCCESS

    response = Response()
    for submsg in submessages:
        response.add_submessage(submsg)
    return response


def get_accrued_rewards(deps: Deps, reward_contract: str, contract_addr: str) -> int:
    """Ask the reward contract how much the given address has accrued."""
    return deps.querier.query_accrued_rewards(reward_contract, contract_addr)