"""Entry points of the custody contract that collects and forwards rewards."""

from __future__ import annotations

from typing import Any

from . import contract as _base
from .contract import CLAIM_REWARDS_OPERATION, SWAP_TO_STABLE_OPERATION
from .deps import Deps, Env, MessageInfo, Response
from .distribution import distribute_hook, distribute_rewards, swap_to_stable_denom
from .errors import InvalidReplyId
from .messages import DistributeRewards

__all__ = ["instantiate", "execute", "reply", "query", "migrate"]


def instantiate(deps: Deps, env: Env, info: MessageInfo, msg: Any) -> Response:
    """Store the initial configuration."""
    return _base.instantiate(deps, env, info, msg)


def execute(deps: Deps, env: Env, info: MessageInfo, msg: Any) -> Response:
    """Dispatch an execute message; reward distribution claims from the reward contract."""
    if isinstance(msg, DistributeRewards):
        return distribute_rewards(deps, env, info)
    return _base.execute(deps, env, info, msg)


def reply(deps: Deps, env: Env, reply_id: int) -> Response:
    """Continue the reward flow after a submessage succeeded."""
    if reply_id == CLAIM_REWARDS_OPERATION:
        return swap_to_stable_denom(deps, env)
    if reply_id == SWAP_TO_STABLE_OPERATION:
        return distribute_hook(deps, env)
    raise InvalidReplyId()


def query(deps: Deps, env: Env, msg: Any) -> Any:
    """Answer a query message."""
    return _base.query(deps, env, msg)


def migrate(deps: Deps, env: Env, msg: Any) -> Response:
    """Accept a migration without changes."""
    return _base.migrate(deps, env, msg)