"""Domain models - pure Python dataclasses representing collections entities"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from ecollect_gateway.utils.identifiers import synthesize_account_key


class AccountSource(str, Enum):
    """Which contact channels contributed to an account"""

    NOTES = "notes"
    SMS = "sms"
    BOTH = "both"


class RiskLevel(str, Enum):
    """Three-tier collections risk"""

    LOW = "LOW"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class Note:
    """Agent interaction note (notehis row)"""

    custnumber: Optional[str]
    accnumber: Optional[str]
    notemade: Optional[str]
    owner: Optional[str] = None
    notedate: Optional[datetime] = None
    notesrc: Optional[str] = None
    noteimp: Optional[str] = None
    reason: Optional[str] = None
    reasondetails: Optional[str] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class SMSLog:
    """Outbound SMS delivery record (sms_logs row)"""

    customer_number: Optional[str]
    message: Optional[str]
    send_status: Optional[str] = None
    date_sent: Optional[datetime] = None
    phone_number: Optional[str] = None
    owner: Optional[str] = None
    arrears: Optional[str] = None
    reference_number: Optional[str] = None
    sms_id: Optional[int] = None


@dataclass
class SMSStats:
    """Delivery and content statistics over one customer's SMS logs"""

    total: int
    successful: int
    failed: int
    success_rate: int
    latest_arrears: Optional[float]
    latest_dpd: Optional[int]
    last_sent_date: Optional[datetime]


@dataclass
class Account:
    """Per-customer collections view derived from notes and SMS logs"""

    id: str
    custnumber: str
    accnumber: Optional[str]  # None when no note carried a usable account number
    customer_name: str
    dpd: int
    status: str
    last_contact: Optional[datetime]
    note_count: int
    sms_count: int
    source: AccountSource

    @property
    def account_key(self) -> str:
        """Account number for display, synthesized for SMS-only customers"""
        return self.accnumber or synthesize_account_key(self.custnumber)


@dataclass
class RiskAssessment:
    """Output of risk classification"""

    level: RiskLevel
    priority_score: float
