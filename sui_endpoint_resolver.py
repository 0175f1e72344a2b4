#!/usr/bin/env python3
"""
Sui Endpoint Resolver

Runs the history queries against an ordered list of RPC endpoints, one at a
time, and returns the result of the first endpoint that answers both the
digest lookup and the detail fetch. Endpoints are never raced or retried.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from sui_base import SuiTool
from sui_ledger_client import SuiLedgerClient
from sui_models import Endpoint, TransactionDetail
from sui_utils import (
    DEFAULT_TX_LIMIT, DEFAULT_DIRECTION, AllEndpointsExhausted, MalformedResponse,
    TransportFailure, logger
)

StatusCallback = Callable[[str], None]


@dataclass(frozen=True)
class EndpointFailure:
    """Why one endpoint was abandoned"""
    endpoint: Endpoint
    reason: str

    def __str__(self) -> str:
        return f"{self.endpoint.url}: {self.reason}"


@dataclass(frozen=True)
class ResolvedHistory:
    """Raw history fetched from the endpoint that answered"""
    endpoint: Endpoint
    digests: List[str]
    details: List[Optional[TransactionDetail]]
    failures: List[EndpointFailure] = field(default_factory=list)


class SuiEndpointResolver(SuiTool):
    def __init__(self, rpc_endpoints: Optional[List[str]] = None, headers=None,
                 direction: str = DEFAULT_DIRECTION,
                 on_status: Optional[StatusCallback] = None,
                 client_factory: Callable[..., SuiLedgerClient] = SuiLedgerClient) -> None:
        """
        Initialize the resolver.

        Args:
            rpc_endpoints: Ordered RPC URLs, first has highest priority
            headers: Optional custom headers passed to each client
            direction: Digest filter direction ('from' or 'to')
            on_status: Optional callback receiving progress messages
            client_factory: Builds a ledger client for one endpoint URL
        """
        super().__init__(rpc_endpoints, headers)
        self.endpoints: List[Endpoint] = [
            Endpoint(url=url, priority=index) for index, url in enumerate(self.rpc_endpoints)
        ]
        self.direction = direction
        self.on_status = on_status
        self.client_factory = client_factory

    def _report(self, message: str) -> None:
        logger.info(message)
        if self.on_status is not None:
            self.on_status(message)

    async def resolve(self, account_id: str, limit: int = DEFAULT_TX_LIMIT) -> ResolvedHistory:
        """
        Fetch digests and details from the first endpoint that answers.

        Args:
            account_id: Sui address
            limit: Maximum number of transactions to fetch

        Returns:
            ResolvedHistory from the winning endpoint, with the failures of
            the endpoints tried before it

        Raises:
            EmptyHistory: If an endpoint reports the account has no transactions
            AllEndpointsExhausted: If every endpoint failed
        """
        failures: List[EndpointFailure] = []

        for endpoint in self.endpoints:
            self._report(f"Querying {endpoint.url} for transactions of {account_id}")
            client = self.client_factory(endpoint.url, headers=self.headers, direction=self.direction)
            try:
                digests = await client.list_transaction_digests(account_id, limit)
                details = await client.fetch_transaction_details(digests)
            except (TransportFailure, MalformedResponse) as e:
                failure = EndpointFailure(endpoint=endpoint, reason=str(e))
                failures.append(failure)
                logger.warning(f"Endpoint {endpoint.url} failed: {e}")
                self._report(f"Endpoint {endpoint.url} failed, trying next endpoint")
                continue

            self._report(f"Fetched {len(details)} transaction details from {endpoint.url}")
            return ResolvedHistory(endpoint=endpoint, digests=digests, details=details,
                                   failures=failures)

        raise AllEndpointsExhausted(failures)
