"""Unit tests for account aggregation"""

import pytest
from conftest import BASE_DATE, make_note, make_sms
from datetime import timedelta
from ecollect_gateway.domain.aggregation import (
    NOTES_CHANNEL,
    SMS_CHANNEL,
    ContactChannel,
    aggregate_accounts,
    aggregate_channels,
    group_by_customer,
    summarize_sources,
)
from ecollect_gateway.domain.models import AccountSource, RiskLevel
from ecollect_gateway.domain.risk import classify_risk


def test_aggregate_empty_inputs():
    """No notes and no SMS gives no accounts"""
    assert aggregate_accounts([], []) == []


def test_bankruptcy_note_alone():
    """Single bankruptcy note: note-count DPD 12, CRITICAL via status"""
    note = make_note(custnumber="C1", accnumber="A1", notemade="Customer filed for bankruptcy")
    accounts = aggregate_accounts([note], [])

    assert len(accounts) == 1
    account = accounts[0]
    assert account.id == "C1"
    assert account.accnumber == "A1"
    assert account.dpd == 12
    assert account.status == "Bankruptcy"
    assert account.source == AccountSource.NOTES
    assert account.note_count == 1
    assert account.sms_count == 0
    assert account.last_contact == BASE_DATE
    assert classify_risk(account.dpd, account.status).level == RiskLevel.CRITICAL


def test_customer_in_both_sources():
    """Notes and SMS for one customer merge into a 'both' account"""
    accounts = aggregate_accounts(
        [make_note(custnumber="C1", notemade="30 DPD")],
        [make_sms(customer_number="C1"), make_sms(customer_number="C1", days_ago=1)],
    )

    assert len(accounts) == 1
    assert accounts[0].source == AccountSource.BOTH
    assert accounts[0].note_count == 1
    assert accounts[0].sms_count == 2
    assert accounts[0].dpd == 30


def test_placeholder_identifiers_are_dropped():
    """'null' in any case, blanks and None never become customers"""
    notes = [
        make_note(custnumber="null"),
        make_note(custnumber="NULL"),
        make_note(custnumber="  "),
        make_note(custnumber=None),
        make_note(custnumber="C1"),
    ]
    sms_logs = [make_sms(customer_number="Null"), make_sms(customer_number="n/a")]

    accounts = aggregate_accounts(notes, sms_logs)

    assert [account.id for account in accounts] == ["C1"]


def test_customer_keys_are_trimmed():
    """Padded keys from either table land on the same customer"""
    accounts = aggregate_accounts([make_note(custnumber=" C1 ")], [make_sms(customer_number="C1  ")])
    assert len(accounts) == 1
    assert accounts[0].id == "C1"
    assert accounts[0].source == AccountSource.BOTH


def test_sms_only_customer():
    """SMS-only account: DPD from 'late by', synthesized account key, SMS date as last contact"""
    sms_logs = [
        make_sms(customer_number="C9", message="Pay Kes 2,000.00, you are late by 45 days"),
        make_sms(customer_number="C9", message="late by 15 days", days_ago=30),
    ]
    account = aggregate_accounts([], sms_logs)[0]

    assert account.source == AccountSource.SMS
    assert account.accnumber is None
    assert account.account_key == "SMS-C9"
    assert account.dpd == 45
    assert account.status == "SMS Only - Overdue"
    assert account.last_contact == BASE_DATE
    assert account.customer_name == "Customer C9"


def test_sms_only_without_dpd_text():
    """No 'late by' mention means DPD 0 and plain 'SMS Only'"""
    account = aggregate_accounts([], [make_sms(customer_number="C9", message="Hello")])[0]
    assert account.dpd == 0
    assert account.status == "SMS Only"


def test_notes_take_precedence_over_sms_for_dpd():
    """When notes exist the SMS 'late by' text is not used"""
    account = aggregate_accounts(
        [make_note(custnumber="C1", notemade="Left voicemail")],
        [make_sms(customer_number="C1", message="late by 80 days")],
    )[0]
    assert account.dpd == 12
    assert account.status == "Active"


def test_first_seen_account_number_wins():
    """Multiple account numbers: the first valid one in input order"""
    notes = [
        make_note(custnumber="C1", accnumber="NULL"),
        make_note(custnumber="C1", accnumber=" A2 ", days_ago=1),
        make_note(custnumber="C1", accnumber="A1", days_ago=2),
    ]
    account = aggregate_accounts(notes, [])[0]

    assert account.accnumber == "A2"
    assert account.account_key == "A2"


def test_notes_with_only_placeholder_account_numbers():
    """Note-only customer with no usable account number still gets a key"""
    account = aggregate_accounts([make_note(custnumber="C1", accnumber="none")], [])[0]
    assert account.accnumber is None
    assert account.account_key == "SMS-C1"


def test_last_contact_is_first_note_not_resorted():
    """Caller order is trusted: the first note is the latest contact"""
    notes = [
        make_note(custnumber="C1", days_ago=5),
        make_note(custnumber="C1", days_ago=0),
    ]
    account = aggregate_accounts(notes, [])[0]
    assert account.last_contact == BASE_DATE - timedelta(days=5)


def test_sorted_by_dpd_descending_with_stable_ties():
    """Highest DPD first; equal DPD keeps first-seen customer order"""
    notes = [
        make_note(custnumber="C1", notemade="10 DPD"),
        make_note(custnumber="C2", notemade="95 DPD"),
        make_note(custnumber="C3", notemade="10 DPD"),
    ]
    sms_logs = [
        make_sms(customer_number="C4", message="late by 10 days"),
        make_sms(customer_number="C5", message="late by 40 days"),
    ]
    accounts = aggregate_accounts(notes, sms_logs)

    assert [account.id for account in accounts] == ["C2", "C5", "C1", "C3", "C4"]


def test_account_ids_are_unique():
    """Each customer appears once no matter how many records it has"""
    notes = [make_note(custnumber=f"C{i % 3}", days_ago=i) for i in range(12)]
    sms_logs = [make_sms(customer_number=f"C{i % 4}", days_ago=i) for i in range(8)]
    ids = [account.id for account in aggregate_accounts(notes, sms_logs)]

    assert len(ids) == len(set(ids)) == 4


def test_aggregation_is_idempotent():
    """Same input twice gives deep-equal output in the same order"""
    notes = [
        make_note(custnumber="C1", notemade="PTP Friday"),
        make_note(custnumber="C2", notemade="Delinquent: 50"),
        make_note(custnumber="C1", notemade="Called", days_ago=2),
    ]
    sms_logs = [make_sms(customer_number="C3", message="late by 5 days")]

    assert aggregate_accounts(notes, sms_logs) == aggregate_accounts(notes, sms_logs)


def test_aggregate_accepts_generators():
    """Inputs only need to be iterable"""
    accounts = aggregate_accounts(
        (note for note in [make_note(custnumber="C1")]),
        (sms for sms in [make_sms(customer_number="C2")]),
    )
    assert {account.id for account in accounts} == {"C1", "C2"}


def test_group_by_customer_tracks_channels_separately():
    """Grouping keeps per-channel lists and distinct account numbers in order"""
    groups = group_by_customer(
        [
            (NOTES_CHANNEL, [make_note(custnumber="C1", accnumber="A1"), make_note(custnumber="C1", accnumber="A1")]),
            (SMS_CHANNEL, [make_sms(customer_number="C1")]),
        ]
    )

    activity = groups["C1"]
    assert len(activity.channel("notes")) == 2
    assert len(activity.channel("sms")) == 1
    assert activity.account_numbers == ["A1"]


def test_aggregate_channels_with_single_channel():
    """The channel list is open: SMS alone works without a notes channel"""
    accounts = aggregate_channels([(SMS_CHANNEL, [make_sms(customer_number="C7")])])
    assert accounts[0].source == AccountSource.SMS


def test_summarize_sources():
    """Counts per source tag, zero for absent tags"""
    accounts = aggregate_accounts(
        [make_note(custnumber="C1"), make_note(custnumber="C2")],
        [make_sms(customer_number="C2"), make_sms(customer_number="C3")],
    )
    assert summarize_sources(accounts) == {"notes": 1, "sms": 1, "both": 1}
    assert summarize_sources([]) == {"notes": 0, "sms": 0, "both": 0}


def test_contact_channel_rejects_unknown_name():
    """A channel must carry a known source tag; bad names fail at construction"""
    with pytest.raises(ValueError):
        ContactChannel(name="email", customer_key=lambda record: record.customer_number)

    with pytest.raises(ValueError):
        ContactChannel(name="both", customer_key=lambda record: record.customer_number)


def test_contact_channel_coerces_string_tag():
    """Plain string tags become AccountSource values"""
    channel = ContactChannel(name="sms", customer_key=lambda sms: sms.customer_number)
    assert channel.name is AccountSource.SMS

    accounts = aggregate_channels([(channel, [make_sms(customer_number="C7")])])
    assert accounts[0].source == AccountSource.SMS
    assert accounts[0].sms_count == 1
