#!/usr/bin/env python3
"""
Sui Transaction Classifier

Infers what a Sui transaction did for one account (swap, send, receive,
plain SUI transfer or a bare contract call) from the balance changes the
node reports. Classification is pure and never raises.

The sender pays gas in SUI, so a sent transaction that also credits the sender
with another asset (a reward claim, say) has both a decrease and an increase
and is reported as a Swap, with the gas debit shown as sent.
"""

from typing import List, Tuple

from sui_models import (
    BalanceChange, ClassifiedTransaction, TransactionCategory, TransactionDetail
)
from sui_utils import (
    MIST_PER_SUI, format_amount, format_gas, format_timestamp_ms,
    is_native_asset, normalize_address
)

# A native-only decrease of at least one SUI is treated as a transfer rather than gas
SUI_SEND_THRESHOLD = MIST_PER_SUI


def format_change(change: BalanceChange) -> str:
    """Format a balance change as '<amount> <label>', e.g. '5.0000 COIN'"""
    amount, label = format_amount(change.raw_amount, change.asset_type)
    return f"{amount} {label}"


def split_changes(changes: List[BalanceChange]) -> Tuple[List[BalanceChange], List[BalanceChange], List[BalanceChange]]:
    """
    Partition one account's balance changes.

    Returns:
        Tuple of (outgoing, incoming, native_only_decreases). When every change
        is a decrease of native SUI, those decreases are returned in the third
        list instead of outgoing so that gas-only transactions can be told
        apart from real sends.
    """
    incoming = [c for c in changes if c.raw_amount > 0]
    decreases = [c for c in changes if c.raw_amount < 0]

    native_only = bool(changes) and all(
        c.raw_amount < 0 and is_native_asset(c.asset_type) for c in changes
    )
    if native_only:
        return [], incoming, decreases
    return decreases, incoming, []


def classify_transaction(detail: TransactionDetail, account_id: str) -> ClassifiedTransaction:
    """
    Classify one transaction from the point of view of account_id.

    Args:
        detail: Transaction as fetched from the node
        account_id: Address whose history is being inspected

    Returns:
        ClassifiedTransaction with category and display strings
    """
    gas_display = format_gas(detail.gas.net_cost)
    timestamp = format_timestamp_ms(detail.timestamp_raw)

    account = normalize_address(account_id)
    my_changes = [
        c for c in detail.balance_changes
        if normalize_address(c.owner_account_id) == account
    ]
    outgoing, incoming, native_decreases = split_changes(my_changes)

    outgoing_display: Tuple[str, ...] = tuple(format_change(c) for c in outgoing)
    incoming_display: Tuple[str, ...] = tuple(format_change(c) for c in incoming)

    if outgoing and incoming:
        category = TransactionCategory.SWAP
    elif outgoing:
        category = TransactionCategory.SEND
    elif incoming:
        category = TransactionCategory.RECEIVE
    elif native_decreases:
        total = sum(abs(c.raw_amount) for c in native_decreases)
        if total >= SUI_SEND_THRESHOLD:
            category = TransactionCategory.SUI_SEND
            amount, label = format_amount(total, native_decreases[0].asset_type)
            outgoing_display = (f"{amount} {label}",)
        else:
            # Only the gas fee left the account
            category = TransactionCategory.CONTRACT_EXECUTION
    else:
        category = TransactionCategory.OTHER

    return ClassifiedTransaction(
        digest=detail.digest,
        timestamp=timestamp,
        category=category,
        outgoing_display=outgoing_display,
        incoming_display=incoming_display,
        gas_cost_display=gas_display,
    )
