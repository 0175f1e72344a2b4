#!/usr/bin/env python3
"""
Sui Ledger Client

Issues the two JSON-RPC queries needed to read an account's history against a
single Sui full node: the digest lookup (suix_queryTransactionBlocks) and the
batched detail fetch (sui_getTransactionBlock). No retry or fallback here;
that is the endpoint resolver's job.
"""

import asyncio
import functools
from typing import Any, Dict, List, Optional

import requests

from sui_base import SuiTool
from sui_models import TransactionDetail
from sui_utils import (
    DEFAULT_TX_LIMIT, DEFAULT_DIRECTION, EmptyHistory, MalformedResponse,
    TransportFailure, logger
)

DIRECTION_FILTERS = {
    'from': 'FromAddress',
    'to': 'ToAddress',
}

DETAIL_OPTIONS = {
    'showInput': True,
    'showEffects': True,
    'showEvents': True,
    'showBalanceChanges': True,
}


class SuiLedgerClient(SuiTool):
    def __init__(self, rpc_url: str, headers: Optional[Dict[str, str]] = None,
                 direction: str = DEFAULT_DIRECTION) -> None:
        """
        Initialize a client bound to one RPC endpoint.

        Args:
            rpc_url: JSON-RPC URL of the full node
            headers: Optional custom headers (defaults to DEFAULT_HEADERS)
            direction: 'from' to list transactions sent by the account, 'to' for received
        """
        super().__init__([rpc_url], headers)
        if direction not in DIRECTION_FILTERS:
            raise ValueError(f"direction must be one of {sorted(DIRECTION_FILTERS)}, got {direction!r}")
        self.rpc_url = rpc_url
        self.direction = direction

    def _post(self, payload: Any) -> Any:
        """
        POST a JSON-RPC payload and return the decoded body.

        Raises:
            TransportFailure: On connection errors, timeouts or non-2xx status
            MalformedResponse: If the body is not JSON
        """
        try:
            response = requests.post(self.rpc_url, json=payload, headers=self.headers,
                                     timeout=self.api_timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportFailure(f"Request to {self.rpc_url} failed: {e}",
                                   endpoint=self.rpc_url, original_error=e)

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse(f"Invalid JSON from {self.rpc_url}: {e}", endpoint=self.rpc_url)

    async def _call(self, payload: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(self._post, payload))

    async def list_transaction_digests(self, account_id: str, limit: int = DEFAULT_TX_LIMIT) -> List[str]:
        """
        List the most recent transaction digests for an account, newest first.

        Args:
            account_id: Sui address
            limit: Maximum number of digests to return

        Returns:
            Ordered list of transaction digests

        Raises:
            EmptyHistory: If the node reports no transactions
            TransportFailure: If the request fails
            MalformedResponse: If the response has an unexpected shape
        """
        payload = {
            'jsonrpc': '2.0',
            'id': 1,
            'method': 'suix_queryTransactionBlocks',
            'params': [
                {'filter': {DIRECTION_FILTERS[self.direction]: account_id}, 'options': None},
                None,   # cursor
                limit,
                True,   # descending order
            ],
        }
        data = await self._call(payload)

        if not isinstance(data, dict):
            raise MalformedResponse(f"Unexpected digest response type from {self.rpc_url}",
                                    endpoint=self.rpc_url)
        if 'error' in data:
            raise MalformedResponse(f"RPC Error from {self.rpc_url}: {data['error']}",
                                    endpoint=self.rpc_url, rpc_error=data['error'])

        result = data.get('result')
        if not isinstance(result, dict):
            raise MalformedResponse(f"Missing result in digest response from {self.rpc_url}",
                                    endpoint=self.rpc_url)

        entries = result.get('data')
        if not entries:
            raise EmptyHistory(account_id)
        if not isinstance(entries, list):
            raise MalformedResponse(f"Digest list is not an array in response from {self.rpc_url}",
                                    endpoint=self.rpc_url)

        digests = [e['digest'] for e in entries if isinstance(e, dict) and e.get('digest')]
        if not digests:
            raise MalformedResponse(f"No digests in non-empty response from {self.rpc_url}",
                                    endpoint=self.rpc_url)
        if len(digests) < len(entries):
            logger.debug(f"Ignored {len(entries) - len(digests)} entries without a digest")
        return digests

    async def fetch_transaction_details(self, digests: List[str]) -> List[Optional[TransactionDetail]]:
        """
        Fetch details for many transactions in one JSON-RPC batch request.

        Args:
            digests: Transaction digests to fetch

        Returns:
            List aligned with digests; an entry is None when the node returned
            no usable payload for that digest

        Raises:
            TransportFailure: If the request fails
            MalformedResponse: If the batch response is not an array
        """
        if not digests:
            return []

        # Ids start at 2; 1 is used by the digest lookup
        requests_by_id = {index + 2: digest for index, digest in enumerate(digests)}
        batch = [
            {
                'jsonrpc': '2.0',
                'id': request_id,
                'method': 'sui_getTransactionBlock',
                'params': [digest, DETAIL_OPTIONS],
            }
            for request_id, digest in requests_by_id.items()
        ]
        data = await self._call(batch)

        if isinstance(data, dict) and 'error' in data:
            raise MalformedResponse(f"RPC Error from {self.rpc_url}: {data['error']}",
                                    endpoint=self.rpc_url, rpc_error=data['error'])
        if not isinstance(data, list):
            raise MalformedResponse(f"Batch response from {self.rpc_url} is not an array",
                                    endpoint=self.rpc_url)

        return [
            self._parse_detail(item, digest)
            for item, digest in zip(self._align_batch(data, requests_by_id), digests)
        ]

    def _align_batch(self, items: List[Any], requests_by_id: Dict[int, str]) -> List[Any]:
        """Order batch results like the requests, by id when the node echoes ids, else by position"""
        by_id = {}
        for item in items:
            if isinstance(item, dict) and item.get('id') in requests_by_id:
                by_id[item['id']] = item

        if len(by_id) == len(items):
            return [by_id.get(request_id) for request_id in requests_by_id]

        logger.debug(f"Batch response from {self.rpc_url} lacks usable ids, aligning by position")
        padded = list(items[:len(requests_by_id)])
        padded.extend([None] * (len(requests_by_id) - len(padded)))
        return padded

    def _parse_detail(self, item: Any, digest: str) -> Optional[TransactionDetail]:
        if not isinstance(item, dict):
            return None
        result = item.get('result')
        if not isinstance(result, dict):
            if 'error' in item:
                logger.debug(f"No detail for {digest}: {item['error']}")
            return None
        return TransactionDetail.from_rpc(result, digest=digest)
