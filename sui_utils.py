#!/usr/bin/env python3
"""
Sui Chain Tools - Shared Utilities

Common functions, constants and exceptions used across the Sui chain tools.
"""

import logging
import yaml
from pathlib import Path
from datetime import datetime
from decimal import Decimal, getcontext
from typing import Dict, List, Optional, Any, Tuple, Union
import pytz

# Set up basic logging first (before config loading)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)

# Custom exception classes
class SuiToolError(Exception):
    """Base exception for all Sui Chain Tools errors"""
    pass


class TransportFailure(SuiToolError):
    """Raised when a request to an RPC endpoint fails at the network/HTTP level"""
    def __init__(self, message: str, endpoint: Optional[str] = None,
                 original_error: Optional[Exception] = None):
        super().__init__(message)
        self.endpoint = endpoint
        self.original_error = original_error


class MalformedResponse(SuiToolError):
    """Raised when an RPC endpoint answers with an unexpected body"""
    def __init__(self, message: str, endpoint: Optional[str] = None,
                 rpc_error: Optional[Any] = None):
        super().__init__(message)
        self.endpoint = endpoint
        self.rpc_error = rpc_error


class EmptyHistory(SuiToolError):
    """Raised when the node reports no transactions for an account"""
    def __init__(self, account_id: str):
        super().__init__(f"No transactions found for address {account_id}")
        self.account_id = account_id


class AllEndpointsExhausted(SuiToolError):
    """Raised when every configured RPC endpoint failed"""
    def __init__(self, failures: List[Any]):
        reasons = "; ".join(str(failure) for failure in failures) or "no endpoints configured"
        super().__init__(f"All RPC endpoints failed: {reasons}")
        self.failures = list(failures)


class InvalidInputError(SuiToolError):
    """Raised when user input is invalid"""
    pass

# Configuration loading
def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML file"""
    if config_path is None:
        config_path = Path(__file__).parent / "config.yaml"
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        # Return defaults if config file doesn't exist
        return {}

    try:
        with open(config_path, 'r') as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load config file {config_path}: {e}")
        return {}

# Load configuration
_config = load_config()

# Reconfigure logging with config if available
_log_config = _config.get('logging', {})
if _log_config:
    log_level = getattr(logging, _log_config.get('level', 'INFO').upper(), logging.INFO)
    log_format = _log_config.get('format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    log_datefmt = _log_config.get('datefmt', '%Y-%m-%d %H:%M:%S')
    logging.basicConfig(level=log_level, format=log_format, datefmt=log_datefmt, force=True)

# Set precision for decimal calculations (with config override support)
_precision = _config.get('decimal_precision', 50)
getcontext().prec = _precision

# RPC endpoints, tried in order (with config override support)
SUI_RPC_ENDPOINTS: List[str] = _config.get('api', {}).get('endpoints', [
    'https://fullnode.mainnet.sui.io:443',
    'https://sui-mainnet-rpc.allthatnode.com:8545',
    'https://sui-rpc.publicnode.com',
])

# Request timeout in seconds (with config override support)
_api_timeout_config = _config.get('api', {}).get('timeout', {})
API_TIMEOUT_DEFAULT = _api_timeout_config.get('default', 10)

# Default headers for API requests
DEFAULT_HEADERS = _config.get('api', {}).get('headers', {
    'Content-Type': 'application/json',
    'User-Agent': 'sui-chain-tools/1.0',
})

# History window (with config override support)
_history_config = _config.get('history', {})
DEFAULT_TX_LIMIT = _history_config.get('limit', 50)
DEFAULT_DIRECTION = _history_config.get('direction', 'from')

SUISCAN_TX_BASE = _config.get('explorer', {}).get('tx_base', "https://suiscan.xyz/mainnet/tx")

# Every asset is scaled as if it had SUI's 9 decimals
SUI_DECIMALS = 9
MIST_PER_SUI = 10 ** SUI_DECIMALS
SUI_COIN_TYPE = "0x2::sui::SUI"

EMPTY_MARKER = "---"
UNKNOWN_TIMESTAMP = "unknown"


def to_int(value: Any, default: int = 0) -> int:
    """Parse an RPC integer (usually sent as a decimal string), falling back to default"""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def normalize_address(address: Any) -> str:
    """
    Normalize a Sui address for comparison.

    Lowercases the hex body and strips leading zeros so that the short
    ("0x2") and long ("0x000...0002") forms compare equal. Non-hex values
    (e.g. "Immutable") are returned lowercased.
    """
    text = str(address or '').strip().lower()
    if not text.startswith('0x'):
        return text
    body = text[2:]
    if not body or any(c not in '0123456789abcdef' for c in body):
        return text
    return '0x' + (body.lstrip('0') or '0')


def normalize_asset_type(asset_type: str) -> str:
    """Normalize the address part of a Move type tag ("0x0..02::sui::SUI" -> "0x2::sui::SUI")"""
    parts = str(asset_type or '').split('::', 1)
    if len(parts) != 2:
        return str(asset_type or '')
    return f"{normalize_address(parts[0])}::{parts[1]}"


def is_native_asset(asset_type: str) -> bool:
    """True if the asset type is the native SUI coin"""
    return normalize_asset_type(asset_type) == SUI_COIN_TYPE


def asset_label(asset_type: str) -> str:
    """
    Short label for a Move type tag.

    Takes the last "::" segment after dropping generic parameters, so
    "0x2::sui::SUI" becomes "SUI" and "0xab::pool::LP<0x2::sui::SUI>" becomes "LP".
    """
    base = str(asset_type or '').split('<', 1)[0]
    label = base.rsplit('::', 1)[-1].strip()
    return label or 'UNKNOWN'


def format_amount(raw_amount: Union[int, str], asset_type: str) -> Tuple[str, str]:
    """
    Format a raw ledger amount for display.

    Args:
        raw_amount: Signed amount in the asset's smallest unit
        asset_type: Fully qualified Move type tag of the asset

    Returns:
        Tuple of (magnitude with exactly 4 decimal places, short asset label)

    Note:
        Every asset is scaled by 10^9 (SUI's precision). Assets with other
        precisions are displayed wrongly; treat the value as best-effort.
    """
    magnitude = Decimal(abs(to_int(raw_amount))) / Decimal(MIST_PER_SUI)
    return f"{magnitude:.4f}", asset_label(asset_type)


def format_gas(raw_gas: int) -> str:
    """Format a raw gas cost in MIST as SUI with 6 decimal places"""
    return f"{Decimal(max(0, raw_gas)) / Decimal(MIST_PER_SUI):.6f}"


def format_timestamp(timestamp: int) -> str:
    """
    Convert a Unix timestamp to UTC text, e.g. "2023-11-14 22:13:20 UTC".

    Args:
        timestamp: Unix timestamp (integer seconds)

    Returns:
        Formatted timestamp string, or "unknown" if it is out of range
    """
    try:
        dt_utc = datetime.fromtimestamp(timestamp, tz=pytz.UTC)
        return dt_utc.strftime("%Y-%m-%d %H:%M:%S UTC")
    except (OverflowError, OSError, ValueError) as e:
        logger.debug(f"Could not format timestamp {timestamp}: {e}")
        return UNKNOWN_TIMESTAMP


def format_timestamp_ms(timestamp_ms: Optional[int]) -> str:
    """Convert an epoch-milliseconds timestamp to UTC text, or "unknown" when absent"""
    if not timestamp_ms:
        return UNKNOWN_TIMESTAMP
    return format_timestamp(timestamp_ms // 1000)
