"""
Pytest configuration and shared fixtures for Sui Chain Tools tests.
"""
import pytest
from unittest.mock import Mock


ACCOUNT = '0x' + 'a' * 64
OTHER_ACCOUNT = '0x' + 'b' * 64
USDC_TYPE = '0xdba34672e30cb065b1f93e3ab55318768fd6fef66c15942c9f7cb846e2f900e7::usdc::USDC'
SUI_TYPE = '0x2::sui::SUI'


def make_response(body, status_error=None):
    """Build a mock requests.Response returning body from .json()"""
    response = Mock()
    response.json.return_value = body
    if status_error is not None:
        response.raise_for_status = Mock(side_effect=status_error)
    else:
        response.raise_for_status = Mock()
    return response


def make_detail_payload(digest, balance_changes, timestamp_ms='1700000000000',
                        computation='1000000', storage='2000000', rebate='978120'):
    """Sample sui_getTransactionBlock result"""
    return {
        'digest': digest,
        'timestampMs': timestamp_ms,
        'effects': {
            'status': {'status': 'success'},
            'gasUsed': {
                'computationCost': computation,
                'storageCost': storage,
                'storageRebate': rebate,
                'nonRefundableStorageFee': '9880',
            },
        },
        'balanceChanges': balance_changes,
    }


def balance_change(owner, coin_type, amount):
    """Sample balanceChanges entry"""
    return {'owner': {'AddressOwner': owner}, 'coinType': coin_type, 'amount': str(amount)}


@pytest.fixture
def account():
    return ACCOUNT


@pytest.fixture
def sample_digest_response():
    """Sample successful suix_queryTransactionBlocks response"""
    return {
        'jsonrpc': '2.0',
        'id': 1,
        'result': {
            'data': [
                {'digest': 'Dig1111111111111111111111111111111111111111'},
                {'digest': 'Dig2222222222222222222222222222222222222222'},
            ],
            'nextCursor': 'Dig2222222222222222222222222222222222222222',
            'hasNextPage': True,
        }
    }


@pytest.fixture
def sample_swap_payload():
    """Transaction where the account swaps SUI for USDC"""
    return make_detail_payload('Dig1111111111111111111111111111111111111111', [
        balance_change(ACCOUNT, SUI_TYPE, -2_500_000_000),
        balance_change(ACCOUNT, USDC_TYPE, 3_000_000_000),
        balance_change(OTHER_ACCOUNT, USDC_TYPE, -3_000_000_000),
    ])


@pytest.fixture
def sample_batch_response(sample_swap_payload):
    """Sample batch response for the two digests in sample_digest_response"""
    return [
        {'jsonrpc': '2.0', 'id': 2, 'result': sample_swap_payload},
        {'jsonrpc': '2.0', 'id': 3, 'result': make_detail_payload(
            'Dig2222222222222222222222222222222222222222',
            [balance_change(ACCOUNT, SUI_TYPE, -1_021_880)],
        )},
    ]
