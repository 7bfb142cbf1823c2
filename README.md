# collateral-custody

An in-memory model of the collateral custody contracts of a money market.
A custody contract holds one collateral token on behalf of borrowers and
keeps, for each borrower, a total `balance` and the `spendable` part of it.
The overseer locks and unlocks collateral against loans and can liquidate
locked collateral. A second variant also claims rewards from a reward
contract, swaps them to the stable denomination and forwards them, less tax,
to the overseer.

Storage, address handling and chain queries are all provided in memory by
`collateral_custody.deps`, so the contracts can be driven and inspected
directly from Python. The package has no dependencies outside the standard
library.

## Installation

```
pip install .
```

Running the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `collateral_custody.deps` – the execution environment:
  - `Deps` bundles a `Storage` (ordered byte key-value store with `get`,
    `set`, `remove`, `range`), an `Api` (`addr_validate`,
    `addr_canonicalize`, `addr_humanize`; addresses are 3 to 64 characters
    and canonicalize to their lower-case UTF-8 bytes) and a `Querier`.
  - `Querier` answers from values you configure: `set_balances`,
    `set_accrued_rewards`, `set_tax(rate, caps)`, and then `query_balance`,
    `query_all_balances`, `query_accrued_rewards`, `deduct_tax`.
  - `Env` (the contract's own address, `MOCK_CONTRACT_ADDR` by default),
    `MessageInfo` (sender and funds), `Coin`, `Response` (`messages` and
    `attributes`), `SubMsg`, `ReplyOn`, and the outgoing messages
    `WasmExecuteMsg`, `BankSendMsg` and `SwapMsg`.
- `collateral_custody.messages` – `InstantiateMsg`, `MigrateMsg`, the execute
  messages (`Receive`, `UpdateConfig`, `LockCollateral`, `UnlockCollateral`,
  `DistributeRewards`, `WithdrawCollateral`, `LiquidateCollateral`), the
  queries (`ConfigQuery`, `BorrowerQuery`, `BorrowersQuery`) and their
  responses, the token messages (`Cw20ReceiveMsg`, `DepositCollateralHook`,
  `Cw20Transfer`, `Cw20Send`), `ExecuteBid` and `ClaimRewards`.
  `to_binary` writes compact JSON (amounts as decimal strings, bytes as
  base64); `from_binary` turns a known tagged message back into its class and
  leaves anything else as plain JSON data; `parse_cw20_hook` accepts only the
  deposit hook.
- `collateral_custody.state` – `Config`, `BorrowerInfo` and the storage
  helpers `store_config`, `read_config`, `store_borrower_info`,
  `read_borrower_info`, `remove_borrower_info`, `read_borrowers`.
- `collateral_custody.collateral` – `deposit_collateral`,
  `withdraw_collateral`, `lock_collateral`, `unlock_collateral`,
  `liquidate_collateral`, `query_borrower`, `query_borrowers`.
- `collateral_custody.contract` – entry points of the plain custody contract:
  `instantiate`, `execute`, `receive_cw20`, `update_config`, `query`,
  `query_config`, `migrate`. Here `DistributeRewards` does nothing and
  returns an empty `Response`.
- `collateral_custody.beth` – entry points of the rewards-forwarding
  contract: `instantiate`, `execute`, `reply(deps, env, reply_id)`, `query`,
  `migrate`.
- `collateral_custody.distribution` – the reward flow used by `beth`:
  `distribute_rewards`, `swap_to_stable_denom`, `distribute_hook`,
  `get_accrued_rewards`.
- `collateral_custody.errors` – `ContractError` and its subclasses
  `StdError`, `Unauthorized`, `InvalidReplyId`,
  `MissingDepositCollateralHook`, `LockAmountExceedsSpendable`,
  `UnlockAmountExceedsLocked`, `LiquidationAmountExceedsLocked` and
  `WithdrawAmountExceedsSpendable`.

## Example

```python
from collateral_custody import contract
from collateral_custody.deps import Deps, Env, MessageInfo
from collateral_custody.messages import (
    BAssetInfo, BorrowerQuery, Cw20ReceiveMsg, DepositCollateralHook,
    InstantiateMsg, LockCollateral, Receive, WithdrawCollateral, from_binary, to_binary,
)

deps = Deps()
env = Env()
contract.instantiate(deps, env, MessageInfo("addr0000"), InstantiateMsg(
    owner="owner", collateral_token="token", overseer_contract="overseer",
    market_contract="market", reward_contract="reward",
    liquidation_contract="liquidation", stable_denom="uusd",
    basset_info=BAssetInfo(name="token", symbol="token", decimals=6),
))

# The collateral token forwards a deposit on behalf of addr0000.
hook = Cw20ReceiveMsg(sender="addr0000", amount=100, msg=to_binary(DepositCollateralHook()))
contract.execute(deps, env, MessageInfo("token"), Receive(hook))

# The overseer locks part of it.
contract.execute(deps, env, MessageInfo("overseer"), LockCollateral(borrower="addr0000", amount=50))

# The borrower withdraws everything still spendable.
contract.execute(deps, env, MessageInfo("addr0000"), WithdrawCollateral(amount=None))

print(from_binary(contract.query(deps, env, BorrowerQuery(address="addr0000"))))
# {'borrower': 'addr0000', 'balance': '50', 'spendable': '0'}
```

Queries return JSON bytes; responses without a tag come back from
`from_binary` as plain dictionaries.

## Rewards

With `collateral_custody.beth`, `DistributeRewards` from the overseer asks
the querier for the rewards accrued to the contract. Below 1,000,000 it
returns an empty `Response`; otherwise it emits a `ClaimRewards` call to the
reward contract that replies with id `CLAIM_REWARDS_OPERATION` (1).
`reply` with that id swaps every non-stable balance into the stable
denomination, the last swap replying with `SWAP_TO_STABLE_OPERATION` (2);
`reply` with that id sends the contract's stable balance, less tax, to the
overseer. Any other id raises `InvalidReplyId`.

## Errors

Failures raise subclasses of `ContractError`. Amount errors carry the bound
that was exceeded: withdrawing more than the spendable amount raises
`WithdrawAmountExceedsSpendable(spendable)`. Errors of the same class with the
same arguments compare equal.

Borrower listings (`BorrowersQuery`) are ordered by canonical address, return
10 entries by default and never more than 30.

## What this package does not do

It runs nothing on a chain: outgoing messages are returned in `Response`
objects and never dispatched, and the `Querier` only reports the balances,
rewards and tax settings it was given. It does not export JSON Schema
documents for the messages, and it has no command-line interface.