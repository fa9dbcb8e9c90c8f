"""Minimal MToken ABI: the tracked events and the two position views."""


def _event(name: str, inputs: list[tuple[str, str, bool]]) -> dict:
    return {
        "anonymous": False,
        "inputs": [
            {"indexed": indexed, "name": arg, "type": typ}
            for arg, typ, indexed in inputs
        ],
        "name": name,
        "type": "event",
    }


def _view(name: str) -> dict:
    return {
        "inputs": [{"internalType": "address", "name": "account", "type": "address"}],
        "name": name,
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    }


MTOKEN_EVENTS_ABI = [
    _event("Borrow", [
        ("borrower", "address", False),
        ("borrowAmount", "uint256", False),
        ("accountBorrows", "uint256", False),
        ("totalBorrows", "uint256", False),
    ]),
    _event("RepayBorrow", [
        ("payer", "address", False),
        ("borrower", "address", False),
        ("repayAmount", "uint256", False),
        ("accountBorrows", "uint256", False),
        ("totalBorrows", "uint256", False),
    ]),
    _event("Mint", [
        ("minter", "address", False),
        ("mintAmount", "uint256", False),
        ("mintTokens", "uint256", False),
    ]),
    _event("Redeem", [
        ("redeemer", "address", False),
        ("redeemAmount", "uint256", False),
        ("redeemTokens", "uint256", False),
    ]),
    _event("LiquidateBorrow", [
        ("liquidator", "address", False),
        ("borrower", "address", False),
        ("repayAmount", "uint256", False),
        ("mTokenCollateral", "address", False),
        ("seizeTokens", "uint256", False),
    ]),
    _event("Transfer", [
        ("from", "address", True),
        ("to", "address", True),
        ("amount", "uint256", False),
    ]),
    _event("Approval", [
        ("owner", "address", True),
        ("spender", "address", True),
        ("amount", "uint256", False),
    ]),
]

MTOKEN_VIEWS_ABI = [
    _view("balanceOf"),
    _view("borrowBalanceStored"),
]

MTOKEN_ABI = MTOKEN_EVENTS_ABI + MTOKEN_VIEWS_ABI
