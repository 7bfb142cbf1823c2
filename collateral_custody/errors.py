"""Errors raised by the custody contract."""

from __future__ import annotations


class ContractError(Exception):
    """Base class of every failure the custody contract reports."""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContractError):
            return NotImplemented
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class StdError(ContractError):
    """A generic failure: bad address, missing state, unparsable data."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class _FixedMessageError(ContractError):
    """An error without arguments whose text is fixed by its class."""

    message = ""

    def __init__(self) -> None:
        super().__init__()

    def __str__(self) -> str:
        return self.message


class Unauthorized(_FixedMessageError):
    """The sender may not perform the requested operation."""

    message = "Unauthorized"


class InvalidReplyId(_FixedMessageError):
    """A reply arrived with an id the contract does not know."""

    message = "Invalid reply ID"


class MissingDepositCollateralHook(_FixedMessageError):
    """A token transfer arrived without the deposit hook message."""

    message = 'Invalid request: "deposit collateral" message not included in request'


class _AmountError(ContractError):
    """An error that carries the amount that bounded the request."""

    template = "{}"

    def __init__(self, amount: int) -> None:
        super().__init__(int(amount))
        self.amount = int(amount)

    def __str__(self) -> str:
        return self.template.format(self.amount)


class LiquidationAmountExceedsLocked(_AmountError):
    """The liquidation amount is larger than the locked collateral."""

    template = "Liquidation amount cannot exceed locked amount: {}"


class LockAmountExceedsSpendable(_AmountError):
    """The lock amount is larger than the spendable collateral."""

    template = "Lock amount cannot excceed the user's spendable amount: {}"


class UnlockAmountExceedsLocked(_AmountError):
    """The unlock amount is larger than the locked collateral."""

    template = "Unlock amount cannot exceed locked amount: {}"


class WithdrawAmountExceedsSpendable(_AmountError):
    """The withdraw amount is larger than the spendable collateral."""

    template = "Withdraw amount cannot exceed the user's spendable amount: {}"