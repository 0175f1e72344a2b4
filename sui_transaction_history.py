#!/usr/bin/env python3
"""
Sui Transaction History

This script reads the most recent transactions of a Sui address from a full
node (falling back across several RPC endpoints), classifies each one as a
swap, send, receive, SUI transfer or contract call, and formats the result as
a markdown table.
"""

import asyncio
import re
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional
import argparse

from sui_base import SuiTool
from sui_endpoint_resolver import EndpointFailure, SuiEndpointResolver, StatusCallback
from sui_models import ClassifiedTransaction, Endpoint
from sui_transaction_classifier import classify_transaction
from sui_utils import (
    DEFAULT_TX_LIMIT, DEFAULT_DIRECTION, AllEndpointsExhausted, EmptyHistory,
    InvalidInputError, logger
)

# Version number (semantic versioning: MAJOR.MINOR.PATCH)
__version__ = "1.0.0"


@dataclass(frozen=True)
class HistoryResult:
    """Outcome of one history request"""
    records: List[ClassifiedTransaction]
    endpoint: Endpoint
    missing_digests: List[str] = field(default_factory=list)
    failures: List[EndpointFailure] = field(default_factory=list)


class SuiTransactionHistory(SuiTool):
    def __init__(self, rpc_endpoints: Optional[List[str]] = None,
                 headers: Optional[Dict[str, str]] = None,
                 limit: int = DEFAULT_TX_LIMIT,
                 direction: str = DEFAULT_DIRECTION,
                 on_status: Optional[StatusCallback] = None) -> None:
        """Initialize the history service"""
        super().__init__(rpc_endpoints, headers)
        self.limit = limit
        self.resolver = SuiEndpointResolver(self.rpc_endpoints, self.headers,
                                            direction=direction, on_status=on_status)

    async def fetch_history(self, account_id: str) -> HistoryResult:
        """
        Fetch and classify the recent transactions of an account.

        Args:
            account_id: Sui address

        Returns:
            HistoryResult whose records are newest first, in the order the node
            listed them. Digests whose details could not be fetched are left
            out of records and listed in missing_digests.

        Raises:
            EmptyHistory: If the account has no transactions
            AllEndpointsExhausted: If no endpoint could answer
        """
        resolved = await self.resolver.resolve(account_id, self.limit)

        records = []
        missing = []
        for digest, detail in zip(resolved.digests, resolved.details):
            if detail is None:
                missing.append(digest)
                continue
            records.append(classify_transaction(detail, account_id))

        if missing:
            logger.warning(f"No details available for {len(missing)} of {len(resolved.digests)} transactions")
        return HistoryResult(records=records, endpoint=resolved.endpoint,
                             missing_digests=missing, failures=resolved.failures)

    async def get_history(self, account_id: str) -> List[ClassifiedTransaction]:
        """Classified transactions of an account; see fetch_history"""
        result = await self.fetch_history(account_id)
        return result.records


def extract_address_from_input(input_str: str) -> str:
    """
    Extract or validate a Sui address from a Suiscan URL or direct address input.

    Args:
        input_str: Suiscan account URL or address (0x...)

    Returns:
        Lowercased 0x-prefixed address

    Raises:
        InvalidInputError: If no valid address can be extracted
    """
    match = re.search(r'0x[a-fA-F0-9]{64}', input_str or '')
    if match:
        return match.group(0).lower()
    raise InvalidInputError("Could not find a valid Sui address. Please provide either a Suiscan URL or an address (0x followed by 64 hex characters)")


def render_markdown(account_id: str, records: List[ClassifiedTransaction]) -> str:
    """Format classified transactions as a markdown table"""
    markdown = "# Sui Transaction History\n\n"
    markdown += f"**Address:** {account_id}\n"
    markdown += f"**Transactions:** {len(records)}\n\n"
    markdown += "| Date | Type | Sent | Received | Gas (SUI) | Transaction |\n"
    markdown += "|---|---|---|---|---|---|\n"
    for record in records:
        markdown += (
            f"| {record.timestamp} | {record.category.value} | {record.outgoing_summary} "
            f"| {record.incoming_summary} | {record.gas_cost_display} "
            f"| [{record.digest[:10]}...]({record.explorer_url}) |\n"
        )
    return markdown


def main():
    parser = argparse.ArgumentParser(description='Show and classify recent transactions of a Sui address')
    parser.add_argument('input', help='Sui address (0x...) or Suiscan account URL')
    parser.add_argument('-l', '--limit', type=int, default=DEFAULT_TX_LIMIT,
                        help=f'Number of recent transactions to fetch (default: {DEFAULT_TX_LIMIT})')
    parser.add_argument('--direction', choices=['from', 'to'], default=DEFAULT_DIRECTION,
                        help='List transactions sent from (default) or received by the address')
    parser.add_argument('-e', '--endpoint', action='append', dest='endpoints',
                        help='RPC endpoint URL, may be repeated (overrides config)')
    parser.add_argument('-o', '--output', help='Output file (optional)')
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    args = parser.parse_args()

    try:
        address = extract_address_from_input(args.input)
    except InvalidInputError as e:
        print(f"Error: {e}")
        sys.exit(1)

    service = SuiTransactionHistory(rpc_endpoints=args.endpoints, limit=args.limit,
                                    direction=args.direction, on_status=print)
    try:
        records = asyncio.run(service.get_history(address))
    except EmptyHistory:
        print(f"No transaction history found for {address}. Try another address.")
        sys.exit(1)
    except AllEndpointsExhausted as e:
        logger.error(f"Error fetching transaction history: {e}")
        print("Could not reach any Sui RPC endpoint. Please try again later.")
        sys.exit(1)

    result = render_markdown(address, records)

    if args.output:
        with open(args.output, 'w') as f:
            f.write(result)
        print(f"Results written to {args.output}")
    else:
        print(result)

if __name__ == "__main__":
    main()
