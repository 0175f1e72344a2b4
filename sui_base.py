#!/usr/bin/env python3
"""
Sui Chain Tools - Base Class

Base class holding the RPC endpoint list, request headers and timeout shared
by the Sui chain tools.
"""

from typing import Dict, List, Optional
from abc import ABC

from sui_utils import SUI_RPC_ENDPOINTS, DEFAULT_HEADERS, API_TIMEOUT_DEFAULT


class SuiTool(ABC):
    """Base class for the ledger client, endpoint resolver and history service"""

    def __init__(self, rpc_endpoints: Optional[List[str]] = None,
                 headers: Optional[Dict[str, str]] = None) -> None:
        """
        Initialize the Sui tool.

        Args:
            rpc_endpoints: Optional ordered list of RPC URLs (defaults to SUI_RPC_ENDPOINTS)
            headers: Optional custom headers (defaults to DEFAULT_HEADERS)
        """
        self.rpc_endpoints: List[str] = list(rpc_endpoints or SUI_RPC_ENDPOINTS)
        self.headers: Dict[str, str] = headers or DEFAULT_HEADERS.copy()
        self.api_timeout: int = API_TIMEOUT_DEFAULT
