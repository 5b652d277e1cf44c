"""Account aggregation - merges contact channels into one ranked account list"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ecollect_gateway.domain.extraction import (
    DEFAULT_STATUS,
    extract_dpd,
    extract_status,
    get_sms_stats,
    sms_fallback,
)
from ecollect_gateway.domain.models import Account, AccountSource, Note, SMSLog
from ecollect_gateway.utils.identifiers import is_valid_value


@dataclass(frozen=True)
class ContactChannel:
    """A source of per-customer contact records, named after its AccountSource tag"""

    name: AccountSource
    customer_key: Callable[[Any], Any]
    account_number: Optional[Callable[[Any], Any]] = None

    def __post_init__(self):
        # Unknown tags fail here rather than mid-aggregation
        name = AccountSource(self.name)
        if name == AccountSource.BOTH:
            raise ValueError("'both' is a derived source, not a channel")
        object.__setattr__(self, "name", name)


NOTES_CHANNEL = ContactChannel(
    name=AccountSource.NOTES,
    customer_key=lambda note: note.custnumber,
    account_number=lambda note: note.accnumber,
)

SMS_CHANNEL = ContactChannel(
    name=AccountSource.SMS,
    customer_key=lambda sms: sms.customer_number,
)


@dataclass
class CustomerActivity:
    """Everything one customer accumulated across channels during grouping"""

    customer_key: str
    records: Dict[str, List[Any]] = field(default_factory=dict)
    account_numbers: List[str] = field(default_factory=list)  # distinct, first-seen order

    def channel(self, name: str) -> List[Any]:
        return self.records.get(name, [])

    def add(self, channel: ContactChannel, record: Any) -> None:
        self.records.setdefault(channel.name.value, []).append(record)

        if channel.account_number is None:
            return
        raw = channel.account_number(record)
        if is_valid_value(raw):
            accnumber = str(raw).strip()
            if accnumber not in self.account_numbers:
                self.account_numbers.append(accnumber)


def normalize_key(value: Any) -> Optional[str]:
    """Trimmed customer key, or None when the identifier is unusable"""
    key = str(value or "").strip()
    return key if is_valid_value(key) else None


def group_by_customer(sources: Sequence[Tuple[ContactChannel, Iterable[Any]]]) -> Dict[str, CustomerActivity]:
    """
    Group records from every channel by customer key.

    Channels are processed in the order given and records in their input
    order, so dict order is first-seen order. Records with a missing or
    placeholder key are dropped.
    """
    customers: Dict[str, CustomerActivity] = {}
    for channel, records in sources:
        for record in records:
            key = normalize_key(channel.customer_key(record))
            if key is None:
                continue
            if key not in customers:
                customers[key] = CustomerActivity(customer_key=key)
            customers[key].add(channel, record)
    return customers


def resolve_source(activity: CustomerActivity) -> AccountSource:
    """Source tag: "both" for multi-channel customers, else the single channel's name"""
    active = [name for name, records in activity.records.items() if records]
    if len(active) > 1:
        return AccountSource.BOTH
    return AccountSource(active[0])


def build_account(activity: CustomerActivity) -> Account:
    """
    Project one customer's activity into an Account.

    Assumes per-channel lists are already newest first; they are not re-sorted.
    - Account number: first one seen across the customer's notes, else None
    - DPD/status: from notes, else from SMS content, else 0 / "Active"
    - Last contact: newest note date, else newest SMS send date
    """
    notes: List[Note] = activity.channel(NOTES_CHANNEL.name.value)
    sms_logs: List[SMSLog] = activity.channel(SMS_CHANNEL.name.value)

    dpd = 0
    status = DEFAULT_STATUS
    last_contact = None

    if notes:
        status = extract_status(notes)
        dpd = extract_dpd(notes)
        last_contact = notes[0].notedate
    elif sms_logs:
        dpd, status = sms_fallback(get_sms_stats(sms_logs))
        last_contact = sms_logs[0].date_sent

    custnumber = activity.customer_key
    return Account(
        id=custnumber,
        custnumber=custnumber,
        accnumber=activity.account_numbers[0] if activity.account_numbers else None,
        customer_name=f"Customer {custnumber}",
        dpd=dpd,
        status=status,
        last_contact=last_contact,
        note_count=len(notes),
        sms_count=len(sms_logs),
        source=resolve_source(activity),
    )


def aggregate_channels(sources: Sequence[Tuple[ContactChannel, Iterable[Any]]]) -> List[Account]:
    """Build the account list from any set of channels, highest DPD first"""
    accounts = [build_account(activity) for activity in group_by_customer(sources).values()]
    # sorted() is stable: equal DPD keeps first-seen customer order
    return sorted(accounts, key=lambda account: account.dpd, reverse=True)


def aggregate_accounts(notes: Iterable[Note], sms_logs: Iterable[SMSLog]) -> List[Account]:
    """
    Main entry point: merge notes and SMS logs into the ranked account list.

    Callers should pass both collections newest first so that last contact
    and first-match extraction reflect the most recent activity.
    """
    return aggregate_channels([(NOTES_CHANNEL, notes), (SMS_CHANNEL, sms_logs)])


def summarize_sources(accounts: Iterable[Account]) -> Dict[str, int]:
    """Count accounts per source tag"""
    counts = {source.value: 0 for source in AccountSource}
    for account in accounts:
        counts[account.source.value] += 1
    return counts
