import pytest

from collateral_custody.beth import execute, instantiate, migrate, query, reply
from collateral_custody.contract import CLAIM_REWARDS_OPERATION, SWAP_TO_STABLE_OPERATION
from collateral_custody.deps import (
    MOCK_CONTRACT_ADDR,
    BankSendMsg,
    Coin,
    Deps,
    Env,
    MessageInfo,
    ReplyOn,
    Response,
    SubMsg,
    SwapMsg,
    WasmExecuteMsg,
)
from collateral_custody.errors import (
    InvalidReplyId,
    LiquidationAmountExceedsLocked,
    LockAmountExceedsSpendable,
    MissingDepositCollateralHook,
    Unauthorized,
    UnlockAmountExceedsLocked,
    WithdrawAmountExceedsSpendable,
)
from collateral_custody.messages import (
    BAssetInfo,
    BorrowerQuery,
    ClaimRewards,
    ConfigQuery,
    Cw20ReceiveMsg,
    Cw20Send,
    Cw20Transfer,
    DepositCollateralHook,
    DistributeRewards,
    ExecuteBid,
    InstantiateMsg,
    LiquidateCollateral,
    LockCollateral,
    MigrateMsg,
    Receive,
    UnlockCollateral,
    UpdateConfig,
    WithdrawCollateral,
    from_binary,
    to_binary,
)
from collateral_custody.state import read_borrower_info


def _init_msg(liquidation="liquidation") -> InstantiateMsg:
    return InstantiateMsg(
        owner="owner",
        collateral_token="beth",
        overseer_contract="overseer",
        market_contract="market",
        reward_contract="reward",
        liquidation_contract=liquidation,
        stable_denom="uusd",
        basset_info=BAssetInfo("beth", "beth", 6),
    )


def _setup(liquidation="liquidation") -> Deps:
    deps = Deps()
    instantiate(deps, Env(), MessageInfo("addr0000"), _init_msg(liquidation))
    return deps


def _deposit_msg() -> Receive:
    return Receive(
        Cw20ReceiveMsg(sender="addr0000", amount=100, msg=to_binary(DepositCollateralHook()))
    )


def _borrower(deps: Deps) -> dict:
    return from_binary(query(deps, Env(), BorrowerQuery(address="addr0000")))


def _claim_submsg() -> SubMsg:
    return SubMsg(
        WasmExecuteMsg(contract_addr="reward", msg=to_binary(ClaimRewards(recipient=None))),
        id=CLAIM_REWARDS_OPERATION,
        reply_on=ReplyOn.SUCCESS,
    )


def test_proper_initialization():
    deps = _setup()
    config = from_binary(query(deps, Env(), ConfigQuery()))
    assert config["owner"] == "owner"
    assert config["collateral_token"] == "beth"
    assert config["overseer_contract"] == "overseer"
    assert config["market_contract"] == "market"
    assert config["reward_contract"] == "reward"
    assert config["liquidation_contract"] == "liquidation"
    assert config["stable_denom"] == "uusd"


def test_update_config():
    deps = _setup()
    msg = UpdateConfig(owner="owner2", liquidation_contract="liquidation2")
    execute(deps, Env(), MessageInfo("owner"), msg)

    config = from_binary(query(deps, Env(), ConfigQuery()))
    assert config["owner"] == "owner2"
    assert config["collateral_token"] == "beth"
    assert config["overseer_contract"] == "overseer"
    assert config["market_contract"] == "market"
    assert config["reward_contract"] == "reward"
    assert config["liquidation_contract"] == "liquidation2"
    assert config["stable_denom"] == "uusd"

    with pytest.raises(Unauthorized):
        execute(deps, Env(), MessageInfo("addr0000"), msg)


def test_deposit_collateral():
    deps = _setup()
    with pytest.raises(Unauthorized):
        execute(deps, Env(), MessageInfo("addr0000"), _deposit_msg())

    invalid = Receive(Cw20ReceiveMsg(sender="addr0000", amount=100, msg=to_binary("invalid")))
    with pytest.raises(MissingDepositCollateralHook):
        execute(deps, Env(), MessageInfo("addr0000"), invalid)

    res = execute(deps, Env(), MessageInfo("beth"), _deposit_msg())
    assert res.attributes == [
        ("action", "deposit_collateral"),
        ("borrower", "addr0000"),
        ("amount", "100"),
    ]
    assert _borrower(deps) == {"borrower": "addr0000", "balance": "100", "spendable": "100"}

    execute(deps, Env(), MessageInfo("beth"), _deposit_msg())
    assert _borrower(deps) == {"borrower": "addr0000", "balance": "200", "spendable": "200"}


def test_withdraw_collateral():
    deps = _setup()
    execute(deps, Env(), MessageInfo("beth"), _deposit_msg())
    info = MessageInfo("addr0000")

    with pytest.raises(WithdrawAmountExceedsSpendable) as excinfo:
        execute(deps, Env(), info, WithdrawCollateral(amount=110))
    assert excinfo.value.amount == 100

    res = execute(deps, Env(), info, WithdrawCollateral(amount=50))
    assert res.attributes == [
        ("action", "withdraw_collateral"),
        ("borrower", "addr0000"),
        ("amount", "50"),
    ]
    assert res.messages == [
        SubMsg(
            WasmExecuteMsg(
                contract_addr="beth",
                msg=to_binary(Cw20Transfer(recipient="addr0000", amount=50)),
            )
        )
    ]
    assert _borrower(deps) == {"borrower": "addr0000", "balance": "50", "spendable": "50"}

    execute(deps, Env(), info, WithdrawCollateral(amount=40))
    assert _borrower(deps) == {"borrower": "addr0000", "balance": "10", "spendable": "10"}

    execute(deps, Env(), info, WithdrawCollateral(amount=None))
    assert _borrower(deps) == {"borrower": "addr0000", "balance": "0", "spendable": "0"}


def test_lock_collateral():
    deps = _setup()
    execute(deps, Env(), MessageInfo("beth"), _deposit_msg())
    lock = LockCollateral(borrower="addr0000", amount=50)

    with pytest.raises(Unauthorized):
        execute(deps, Env(), MessageInfo("addr0000"), lock)

    with pytest.raises(LockAmountExceedsSpendable) as excinfo:
        execute(deps, Env(), MessageInfo("overseer"), LockCollateral(borrower="addr0000", amount=200))
    assert excinfo.value == LockAmountExceedsSpendable(100)

    res = execute(deps, Env(), MessageInfo("overseer"), lock)
    assert res.attributes == [
        ("action", "lock_collateral"),
        ("borrower", "addr0000"),
        ("amount", "50"),
    ]
    raw = deps.api.addr_canonicalize("addr0000")
    assert read_borrower_info(deps.storage, raw).spendable == 50

    with pytest.raises(WithdrawAmountExceedsSpendable) as excinfo:
        execute(deps, Env(), MessageInfo("addr0000"), WithdrawCollateral(amount=51))
    assert excinfo.value.amount == 50

    res = execute(deps, Env(), MessageInfo("addr0000"), WithdrawCollateral(amount=50))
    assert res.attributes == [
        ("action", "withdraw_collateral"),
        ("borrower", "addr0000"),
        ("amount", "50"),
    ]
    assert _borrower(deps) == {"borrower": "addr0000", "balance": "50", "spendable": "0"}

    unlock = UnlockCollateral(borrower="addr0000", amount=30)
    with pytest.raises(Unauthorized):
        execute(deps, Env(), MessageInfo("addr0000"), unlock)

    with pytest.raises(UnlockAmountExceedsLocked) as excinfo:
        execute(deps, Env(), MessageInfo("overseer"), UnlockCollateral(borrower="addr0000", amount=230))
    assert excinfo.value.amount == 50

    res = execute(deps, Env(), MessageInfo("overseer"), unlock)
    assert res.attributes == [
        ("action", "unlock_collateral"),
        ("borrower", "addr0000"),
        ("amount", "30"),
    ]
    assert read_borrower_info(deps.storage, raw).spendable == 30

    res = execute(deps, Env(), MessageInfo("addr0000"), WithdrawCollateral(amount=30))
    assert res.attributes == [
        ("action", "withdraw_collateral"),
        ("borrower", "addr0000"),
        ("amount", "30"),
    ]
    assert _borrower(deps) == {"borrower": "addr0000", "balance": "20", "spendable": "0"}


def test_distribute_rewards():
    deps = _setup()
    deps.querier.set_balances(MOCK_CONTRACT_ADDR, [Coin("uusd", 1_000_000)])

    with pytest.raises(Unauthorized):
        execute(deps, Env(), MessageInfo("addr0000"), DistributeRewards())

    deps.querier.set_balances("reward", [Coin("uusd", 10_000_000)])
    deps.querier.set_accrued_rewards(MOCK_CONTRACT_ADDR, 10_000_000)
    res = execute(deps, Env(), MessageInfo("overseer"), DistributeRewards())
    assert res.attributes == []
    assert res.messages == [_claim_submsg()]


def test_distribute_hook():
    deps = _setup()
    deps.querier.set_tax("0.01", {"uusd": 1_000_000})
    deps.querier.set_balances(MOCK_CONTRACT_ADDR, [Coin("uusd", 1_000_000)])

    res = reply(deps, Env(), SWAP_TO_STABLE_OPERATION)
    assert res.attributes == [("action", "distribute_rewards"), ("buffer_rewards", "1000000")]
    assert res.messages == [
        SubMsg(BankSendMsg(to_address="overseer", amount=[Coin("uusd", 990099)]))
    ]


def test_distribution_hook_zero_rewards():
    deps = _setup(liquidation="terraswap")
    res = reply(deps, Env(), SWAP_TO_STABLE_OPERATION)
    assert res.attributes == [("action", "distribute_rewards"), ("buffer_rewards", "0")]
    assert res.messages == []


def test_swap_to_stable_denom():
    deps = _setup()
    deps.querier.set_balances(
        MOCK_CONTRACT_ADDR,
        [Coin("uusd", 1_000_000), Coin("ukrw", 20_000_000_000), Coin("usdr", 2_000_000)],
    )
    res = reply(deps, Env(), 1)
    assert res.messages == [
        SubMsg(SwapMsg(Coin("ukrw", 20_000_000_000), "uusd")),
        SubMsg(
            SwapMsg(Coin("usdr", 2_000_000), "uusd"),
            id=SWAP_TO_STABLE_OPERATION,
            reply_on=ReplyOn.SUCCESS,
        ),
    ]


def test_reply_with_unknown_id():
    deps = _setup()
    with pytest.raises(InvalidReplyId):
        reply(deps, Env(), 3)


def test_liquidate_collateral():
    deps = _setup()
    execute(deps, Env(), MessageInfo("beth"), _deposit_msg())
    res = execute(deps, Env(), MessageInfo("overseer"), LockCollateral(borrower="addr0000", amount=50))
    assert res.attributes == [
        ("action", "lock_collateral"),
        ("borrower", "addr0000"),
        ("amount", "50"),
    ]

    msg = LiquidateCollateral(liquidator="addr0001", borrower="addr0000", amount=100)
    with pytest.raises(Unauthorized):
        execute(deps, Env(), MessageInfo("addr0000"), msg)

    with pytest.raises(LiquidationAmountExceedsLocked) as excinfo:
        execute(deps, Env(), MessageInfo("overseer"), msg)
    assert excinfo.value.amount == 50

    msg = LiquidateCollateral(liquidator="liquidator", borrower="addr0000", amount=10)
    res = execute(deps, Env(), MessageInfo("overseer"), msg)
    assert res.attributes == [
        ("action", "liquidate_collateral"),
        ("liquidator", "liquidator"),
        ("borrower", "addr0000"),
        ("amount", "10"),
    ]
    bid = ExecuteBid(liquidator="liquidator", fee_address="overseer", repay_address="market")
    assert res.messages == [
        SubMsg(
            WasmExecuteMsg(
                contract_addr="beth",
                msg=to_binary(Cw20Send(contract="liquidation", amount=10, msg=to_binary(bid))),
            )
        )
    ]


def test_proper_distribute_rewards_with_no_rewards():
    deps = _setup()
    deps.querier.set_balances(MOCK_CONTRACT_ADDR, [Coin("uusd", 1_000_000)])

    with pytest.raises(Unauthorized):
        execute(deps, Env(), MessageInfo("addr0000"), DistributeRewards())

    assert execute(deps, Env(), MessageInfo("overseer"), DistributeRewards()) == Response()

    deps.querier.set_accrued_rewards(MOCK_CONTRACT_ADDR, 0)
    assert execute(deps, Env(), MessageInfo("overseer"), DistributeRewards()) == Response()

    deps.querier.set_accrued_rewards(MOCK_CONTRACT_ADDR, 10_000_000)
    res = execute(deps, Env(), MessageInfo("overseer"), DistributeRewards())
    assert res.attributes == []
    assert res.messages == [_claim_submsg()]


def test_migrate_returns_empty_response():
    deps = _setup()
    assert migrate(deps, Env(), MigrateMsg()) == Response()