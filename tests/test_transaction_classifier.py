"""
Tests for sui_transaction_classifier and the sui_models dataclasses.
"""
import pytest

from sui_models import (
    BalanceChange, ClassifiedTransaction, GasUsage, TransactionCategory, TransactionDetail,
    summarize_display
)
from sui_transaction_classifier import classify_transaction, split_changes, SUI_SEND_THRESHOLD
from sui_utils import EMPTY_MARKER, UNKNOWN_TIMESTAMP

from conftest import ACCOUNT, OTHER_ACCOUNT, SUI_TYPE, USDC_TYPE, balance_change, make_detail_payload


def make_detail(changes, timestamp_raw=1700000000000, gas=None):
    return TransactionDetail(
        digest='DigTest',
        timestamp_raw=timestamp_raw,
        gas=gas or GasUsage(1_000_000, 2_000_000, 978_120),
        balance_changes=tuple(BalanceChange(owner, asset, amount) for owner, asset, amount in changes),
    )


class TestClassification:
    """Tests for classify_transaction"""

    def test_swap_scenario(self):
        """Account loses one coin and gains another"""
        detail = make_detail([
            (ACCOUNT, 'X::COIN', -5_000_000_000),
            (ACCOUNT, 'Y::COIN', 3_000_000_000),
        ])

        record = classify_transaction(detail, ACCOUNT)

        assert record.category == TransactionCategory.SWAP
        assert '5.0000 COIN' in record.outgoing_display
        assert '3.0000 COIN' in record.incoming_display

    def test_swap_with_native_asset(self):
        detail = make_detail([
            (ACCOUNT, SUI_TYPE, -2_500_000_000),
            (ACCOUNT, USDC_TYPE, 3_000_000_000),
        ])

        record = classify_transaction(detail, ACCOUNT)

        assert record.category == TransactionCategory.SWAP
        assert record.outgoing_display == ('2.5000 SUI',)
        assert record.incoming_display == ('3.0000 USDC',)

    def test_claim_paid_with_gas_is_swap(self):
        """Gas debit plus an incoming token counts as a swap"""
        detail = make_detail([
            (ACCOUNT, SUI_TYPE, -2_021_880),
            (ACCOUNT, USDC_TYPE, 4_000_000_000),
        ])

        record = classify_transaction(detail, ACCOUNT)

        assert record.category == TransactionCategory.SWAP
        assert record.outgoing_display == ('0.0020 SUI',)
        assert record.incoming_display == ('4.0000 USDC',)

    def test_send(self):
        detail = make_detail([
            (ACCOUNT, SUI_TYPE, -3_000_000),
            (ACCOUNT, USDC_TYPE, -1_000_000_000),
            (OTHER_ACCOUNT, USDC_TYPE, 1_000_000_000),
        ])

        record = classify_transaction(detail, ACCOUNT)

        assert record.category == TransactionCategory.SEND
        assert record.outgoing_display == ('0.0030 SUI', '1.0000 USDC')
        assert record.incoming_display == ()
        assert record.incoming_summary == EMPTY_MARKER

    def test_only_negative_non_native_entries_is_send(self):
        for amounts in ([-1], [-5, -7], [-10 ** 12, -1, -3]):
            detail = make_detail([(ACCOUNT, USDC_TYPE, a) for a in amounts])
            assert classify_transaction(detail, ACCOUNT).category == TransactionCategory.SEND

    def test_receive(self):
        detail = make_detail([
            (ACCOUNT, USDC_TYPE, 7_000_000_000),
            (OTHER_ACCOUNT, USDC_TYPE, -7_000_000_000),
        ])

        record = classify_transaction(detail, ACCOUNT)

        assert record.category == TransactionCategory.RECEIVE
        assert record.incoming_display == ('7.0000 USDC',)
        assert record.outgoing_summary == EMPTY_MARKER

    def test_gas_only_is_contract_execution(self):
        detail = make_detail([(ACCOUNT, SUI_TYPE, -2_021_880)])

        record = classify_transaction(detail, ACCOUNT)

        assert record.category == TransactionCategory.CONTRACT_EXECUTION
        assert record.outgoing_display == ()
        assert record.gas_cost_display == '0.002022'

    def test_native_decrease_just_below_threshold(self):
        detail = make_detail([(ACCOUNT, SUI_TYPE, -(SUI_SEND_THRESHOLD - 1))])
        assert classify_transaction(detail, ACCOUNT).category == TransactionCategory.CONTRACT_EXECUTION

    def test_native_decrease_at_threshold_is_sui_send(self):
        detail = make_detail([(ACCOUNT, SUI_TYPE, -SUI_SEND_THRESHOLD)])
        assert classify_transaction(detail, ACCOUNT).category == TransactionCategory.SUI_SEND

    def test_sui_send(self):
        long_sui_type = '0x' + '0' * 63 + '2::sui::SUI'
        detail = make_detail([
            (ACCOUNT, long_sui_type, -5_002_021_880),
            (OTHER_ACCOUNT, long_sui_type, 5_000_000_000),
        ])

        record = classify_transaction(detail, ACCOUNT)

        assert record.category == TransactionCategory.SUI_SEND
        assert record.outgoing_display == ('5.0020 SUI',)
        assert record.incoming_display == ()

    def test_no_changes_is_other(self):
        record = classify_transaction(make_detail([]), ACCOUNT)
        assert record.category == TransactionCategory.OTHER

    def test_changes_of_other_owners_only_is_other(self):
        detail = make_detail([(OTHER_ACCOUNT, USDC_TYPE, 10), (OTHER_ACCOUNT, SUI_TYPE, -10)])
        assert classify_transaction(detail, ACCOUNT).category == TransactionCategory.OTHER

    def test_owner_matching_ignores_case_and_padding(self):
        short_owner = '0x' + 'A' * 64
        detail = make_detail([(short_owner, USDC_TYPE, 1_000_000_000)])
        assert classify_transaction(detail, ACCOUNT).category == TransactionCategory.RECEIVE

    def test_display_keeps_reported_order_and_counts_rest(self):
        detail = make_detail([
            (ACCOUNT, 'A::TOKA', -1_000_000_000),
            (ACCOUNT, 'B::TOKB', -2_000_000_000),
            (ACCOUNT, 'C::TOKC', -3_000_000_000),
            (ACCOUNT, 'D::TOKD', 4_000_000_000),
        ])

        record = classify_transaction(detail, ACCOUNT)

        assert record.outgoing_display == ('1.0000 TOKA', '2.0000 TOKB', '3.0000 TOKC')
        assert record.outgoing_summary == '1.0000 TOKA +2 more'
        assert record.incoming_summary == '4.0000 TOKD'

    def test_missing_timestamp_is_unknown(self):
        record = classify_transaction(make_detail([], timestamp_raw=None), ACCOUNT)
        assert record.timestamp == UNKNOWN_TIMESTAMP

    def test_timestamp_formatted(self):
        record = classify_transaction(make_detail([]), ACCOUNT)
        assert record.timestamp == '2023-11-14 22:13:20 UTC'

    def test_negative_net_gas_clamped(self):
        detail = make_detail([], gas=GasUsage(1_000, 2_000, 10_000))
        assert classify_transaction(detail, ACCOUNT).gas_cost_display == '0.000000'


class TestSplitChanges:
    """Tests for split_changes"""

    def test_native_only_decreases_withheld(self):
        changes = [BalanceChange(ACCOUNT, SUI_TYPE, -5), BalanceChange(ACCOUNT, SUI_TYPE, -7)]

        outgoing, incoming, native = split_changes(changes)

        assert outgoing == []
        assert incoming == []
        assert native == changes

    def test_mixed_decreases_are_outgoing(self):
        changes = [BalanceChange(ACCOUNT, SUI_TYPE, -5), BalanceChange(ACCOUNT, USDC_TYPE, -7)]

        outgoing, incoming, native = split_changes(changes)

        assert outgoing == changes
        assert native == []

    def test_zero_amounts_ignored(self):
        outgoing, incoming, native = split_changes([BalanceChange(ACCOUNT, USDC_TYPE, 0)])
        assert (outgoing, incoming, native) == ([], [], [])


class TestModels:
    """Tests for building models from RPC payloads"""

    def test_detail_from_rpc(self):
        payload = make_detail_payload('DigA', [
            balance_change(ACCOUNT, SUI_TYPE, -2_021_880),
            {'owner': {'ObjectOwner': OTHER_ACCOUNT}, 'coinType': USDC_TYPE, 'amount': '15'},
        ])

        detail = TransactionDetail.from_rpc(payload)

        assert detail.digest == 'DigA'
        assert detail.timestamp_raw == 1700000000000
        assert detail.gas.net_cost == 2_021_880
        assert detail.balance_changes[0] == BalanceChange(ACCOUNT, SUI_TYPE, -2_021_880)
        assert detail.balance_changes[1].owner_account_id == OTHER_ACCOUNT

    def test_detail_from_rpc_missing_fields(self):
        detail = TransactionDetail.from_rpc({}, digest='DigB')

        assert detail.digest == 'DigB'
        assert detail.timestamp_raw is None
        assert detail.gas.net_cost == 0
        assert detail.balance_changes == ()

    def test_detail_from_rpc_checkpoint_timestamp(self):
        detail = TransactionDetail.from_rpc({'digest': 'DigC', 'checkpoint': {'timestampMs': '1700000000000'}})
        assert detail.timestamp_raw == 1700000000000

    def test_gas_without_computation_cost_is_zero(self):
        gas = GasUsage.from_effects({'gasUsed': {'storageCost': '500'}})
        assert gas.net_cost == 0

    def test_gas_non_numeric_fields(self):
        gas = GasUsage.from_effects({'gasUsed': {'computationCost': 'n/a', 'storageCost': '500',
                                                 'storageRebate': None}})
        assert gas.net_cost == 500

    def test_balance_change_malformed(self):
        change = BalanceChange.from_rpc({'owner': 'Immutable', 'amount': 'lots'})

        assert change.owner_account_id == 'Immutable'
        assert change.asset_type == ''
        assert change.raw_amount == 0

    def test_malformed_balance_change_entries_skipped(self):
        payload = make_detail_payload('DigD', ['junk', balance_change(ACCOUNT, SUI_TYPE, -1)])
        detail = TransactionDetail.from_rpc(payload)
        assert len(detail.balance_changes) == 1

    def test_summarize_display(self):
        assert summarize_display(()) == EMPTY_MARKER
        assert summarize_display(('1.0000 SUI',)) == '1.0000 SUI'
        assert summarize_display(('a', 'b', 'c', 'd')) == 'a +3 more'

    def test_explorer_url(self):
        record = ClassifiedTransaction('DigE', UNKNOWN_TIMESTAMP, TransactionCategory.OTHER)
        assert record.explorer_url == 'https://suiscan.xyz/mainnet/tx/DigE'
