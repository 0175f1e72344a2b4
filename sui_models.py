#!/usr/bin/env python3
"""
Sui Chain Tools - Data Model

Dataclasses shared by the ledger client, the classifier and the history service.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from sui_utils import SUISCAN_TX_BASE, EMPTY_MARKER, to_int, logger


class TransactionCategory(Enum):
    """Semantic category inferred from a transaction's balance changes"""
    SWAP = "Swap"
    SEND = "Send"
    RECEIVE = "Receive"
    SUI_SEND = "SuiSend"
    CONTRACT_EXECUTION = "ContractExecution"
    OTHER = "Other"


@dataclass(frozen=True)
class Endpoint:
    """An RPC endpoint; priority is its position in the configured list"""
    url: str
    priority: int = 0

    def __str__(self) -> str:
        return self.url


@dataclass(frozen=True)
class BalanceChange:
    """Net change of one asset for one owner within one transaction"""
    owner_account_id: str
    asset_type: str
    raw_amount: int

    @classmethod
    def from_rpc(cls, payload: Dict[str, Any]) -> 'BalanceChange':
        owner = payload.get('owner')
        if isinstance(owner, dict):
            # {"AddressOwner": "0x.."}, {"ObjectOwner": "0x.."}, {"Shared": {...}}
            owner = owner.get('AddressOwner') or owner.get('ObjectOwner') or ''
        return cls(
            owner_account_id=str(owner or ''),
            asset_type=str(payload.get('coinType') or ''),
            raw_amount=to_int(payload.get('amount')),
        )


@dataclass(frozen=True)
class GasUsage:
    """Gas summary of a transaction, in MIST"""
    computation_cost: int = 0
    storage_cost: int = 0
    storage_rebate: int = 0

    @property
    def net_cost(self) -> int:
        return max(0, self.computation_cost + self.storage_cost - self.storage_rebate)

    @classmethod
    def from_effects(cls, effects: Any) -> 'GasUsage':
        if not isinstance(effects, dict):
            return cls()
        gas_used = effects.get('gasUsed')
        if not isinstance(gas_used, dict) or 'computationCost' not in gas_used:
            return cls()
        return cls(
            computation_cost=to_int(gas_used.get('computationCost')),
            storage_cost=to_int(gas_used.get('storageCost')),
            storage_rebate=to_int(gas_used.get('storageRebate')),
        )


@dataclass(frozen=True)
class TransactionDetail:
    """One transaction as returned by sui_getTransactionBlock"""
    digest: str
    timestamp_raw: Optional[int]
    gas: GasUsage
    balance_changes: Tuple[BalanceChange, ...] = ()

    @classmethod
    def from_rpc(cls, payload: Dict[str, Any], digest: Optional[str] = None) -> 'TransactionDetail':
        """
        Build a TransactionDetail from a sui_getTransactionBlock result.

        Missing or malformed fields degrade to defaults instead of raising, so
        one odd transaction never aborts the whole batch.

        Args:
            payload: The "result" member of the RPC response
            digest: Digest that was requested, used when the payload lacks one
        """
        effects = payload.get('effects')
        timestamp = payload.get('timestampMs')
        if timestamp is None and isinstance(effects, dict):
            timestamp = effects.get('timestampMs')
        if timestamp is None and isinstance(payload.get('checkpoint'), dict):
            timestamp = payload['checkpoint'].get('timestampMs')

        changes = []
        raw_changes = payload.get('balanceChanges') or []
        if isinstance(raw_changes, list):
            for raw in raw_changes:
                if isinstance(raw, dict):
                    changes.append(BalanceChange.from_rpc(raw))
                else:
                    logger.debug(f"Skipping malformed balance change: {raw!r}")

        return cls(
            digest=str(payload.get('digest') or digest or ''),
            timestamp_raw=to_int(timestamp) or None,
            gas=GasUsage.from_effects(effects),
            balance_changes=tuple(changes),
        )


def summarize_display(items: Tuple[str, ...]) -> str:
    """First entry plus a "+N more" suffix for the rest, or the empty marker"""
    if not items:
        return EMPTY_MARKER
    if len(items) == 1:
        return items[0]
    return f"{items[0]} +{len(items) - 1} more"


@dataclass(frozen=True)
class ClassifiedTransaction:
    """A transaction with its inferred category and display strings"""
    digest: str
    timestamp: str
    category: TransactionCategory
    outgoing_display: Tuple[str, ...] = field(default_factory=tuple)
    incoming_display: Tuple[str, ...] = field(default_factory=tuple)
    gas_cost_display: str = "0.000000"

    @property
    def outgoing_summary(self) -> str:
        return summarize_display(self.outgoing_display)

    @property
    def incoming_summary(self) -> str:
        return summarize_display(self.incoming_display)

    @property
    def explorer_url(self) -> str:
        return f"{SUISCAN_TX_BASE}/{self.digest}"
