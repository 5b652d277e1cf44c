"""Status and DPD extraction from free-text notes and SMS logs"""

import math
import re
from typing import List, Optional, Pattern, Sequence, Tuple

from ecollect_gateway.domain.models import Note, SMSLog, SMSStats

DEFAULT_STATUS = "Active"

# Ordered (keyword, status) rules. First note with a hit wins; within a note,
# the first rule in table order wins.
STATUS_RULES: List[Tuple[str, str]] = [
    ("bankruptcy", "Bankruptcy"),
    ("legal", "Legal"),
    ("promise to pay", "Promise to Pay"),
    ("ptp", "Promise to Pay"),
    ("paid", "Paid"),
    ("dispute", "Dispute"),
    ("broken", "Broken Promise"),
    ("skip", "Skip"),
    ("deceased", "Deceased"),
    ("settlement", "Settlement"),
    ("arrangement", "Arrangement"),
]

# Ordered DPD patterns, group 1 is the day count (ASCII digits only)
DPD_PATTERNS: List[Pattern[str]] = [
    re.compile(r"(\d+)\s*(?:days?\s*past\s*due|dpd)", re.IGNORECASE | re.ASCII),
    re.compile(r"dpd[:\s]*(\d+)", re.IGNORECASE | re.ASCII),
    re.compile(r"(\d+)\s*dpd", re.IGNORECASE | re.ASCII),
    re.compile(r"delinquent[:\s]*(\d+)", re.IGNORECASE | re.ASCII),
]

SMS_ARREARS_PATTERN = re.compile(r"Kes\.?\s*([\d,]+(?:\.\d{2})?)", re.IGNORECASE | re.ASCII)
SMS_DPD_PATTERN = re.compile(r"late by (\d+)\s*days?", re.IGNORECASE | re.ASCII)

SMS_OVERDUE_THRESHOLD_DAYS = 30


def note_text(note: Note) -> str:
    """Searchable text of a note: body, reason and reason details"""
    return f"{note.notemade or ''} {note.reason or ''} {note.reasondetails or ''}"


def extract_status(notes: Sequence[Note]) -> str:
    """
    Derive a categorical account status from notes (expected newest first).

    Scans notes in order and returns the status of the first keyword rule
    that matches, or "Active" when no note mentions any keyword.
    """
    for note in notes:
        content = note_text(note).lower()
        for keyword, status in STATUS_RULES:
            if keyword in content:
                return status
    return DEFAULT_STATUS


def note_count_dpd(note_count: int) -> int:
    """
    Estimate DPD from interaction volume when no note states it explicitly.

    More notes means a longer-running collections effort:
    - more than 10 notes: 60 + min(count*3, 120)
    - more than 5 notes:  30 + count*3
    - otherwise:          10 + count*2
    """
    if note_count > 10:
        return 60 + min(note_count * 3, 120)
    if note_count > 5:
        return 30 + note_count * 3
    return 10 + note_count * 2


def extract_dpd(notes: Sequence[Note]) -> int:
    """
    Derive days past due from notes (expected newest first).

    Returns the number captured by the first matching pattern on the first
    matching note, falling back to the note-count estimate.
    """
    for note in notes:
        content = note_text(note)
        for pattern in DPD_PATTERNS:
            match = pattern.search(content)
            if match:
                return int(match.group(1))
    return note_count_dpd(len(notes))


def _first_arrears(sms_logs: Sequence[SMSLog]) -> Optional[float]:
    for sms in sms_logs:
        match = SMS_ARREARS_PATTERN.search(sms.message or "")
        if match:
            try:
                return float(match.group(1).replace(",", ""))
            except ValueError:
                # A bare run of commas matches the pattern but is not an amount
                continue
    return None


def _first_sms_dpd(sms_logs: Sequence[SMSLog]) -> Optional[int]:
    for sms in sms_logs:
        match = SMS_DPD_PATTERN.search(sms.message or "")
        if match:
            return int(match.group(1))
    return None


def get_sms_stats(sms_logs: Sequence[SMSLog]) -> SMSStats:
    """
    Summarize a customer's SMS logs (expected newest first).

    latest_arrears and latest_dpd come from the first message that mentions
    them; last_sent_date is the first log's send date.
    """
    total = len(sms_logs)
    successful = sum(1 for sms in sms_logs if (sms.send_status or "").lower() == "success")

    # Half-up rounding, 2 of 3 delivered reads as 67%
    success_rate = math.floor(successful / total * 100 + 0.5) if total > 0 else 0

    return SMSStats(
        total=total,
        successful=successful,
        failed=total - successful,
        success_rate=success_rate,
        latest_arrears=_first_arrears(sms_logs),
        latest_dpd=_first_sms_dpd(sms_logs),
        last_sent_date=sms_logs[0].date_sent if sms_logs else None,
    )


def sms_fallback(stats: SMSStats) -> Tuple[int, str]:
    """DPD and status for a customer known only from SMS logs"""
    dpd = stats.latest_dpd or 0
    status = "SMS Only - Overdue" if dpd > SMS_OVERDUE_THRESHOLD_DAYS else "SMS Only"
    return dpd, status
