"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ecollect_gateway.domain.models import Account, Note, SMSLog, SMSStats
from ecollect_gateway.domain.risk import classify_risk, risk_description

NO_CONTACT = "N/A"


class AccountSchema(BaseModel):
    """Aggregated account as consumed by the agent console"""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    custnumber: str
    accnumber: str
    customer_name: str = Field(alias="customerName")
    dpd: int
    status: str
    last_contact: str = Field(alias="lastContact")
    note_count: int = Field(alias="noteCount")
    sms_count: int = Field(alias="smsCount")
    source: Literal["notes", "sms", "both"]
    risk_level: Literal["LOW", "HIGH", "CRITICAL"] = Field(alias="riskLevel")
    priority_score: float = Field(alias="priorityScore")

    @classmethod
    def from_account(cls, account: Account) -> "AccountSchema":
        risk = classify_risk(account.dpd, account.status)
        return cls(
            id=account.id,
            custnumber=account.custnumber,
            accnumber=account.account_key,
            customer_name=account.customer_name,
            dpd=account.dpd,
            status=account.status,
            last_contact=account.last_contact.isoformat() if account.last_contact else NO_CONTACT,
            note_count=account.note_count,
            sms_count=account.sms_count,
            source=account.source.value,
            risk_level=risk.level.value,
            priority_score=risk.priority_score,
        )


class SMSStatsSchema(BaseModel):
    """Delivery statistics for one customer's SMS logs"""

    model_config = ConfigDict(populate_by_name=True)

    total: int
    successful: int
    failed: int
    success_rate: int = Field(alias="successRate")
    latest_arrears: Optional[float] = Field(default=None, alias="latestArrears")
    latest_dpd: Optional[int] = Field(default=None, alias="latestDPD")
    last_sent_date: Optional[datetime] = Field(default=None, alias="lastSentDate")

    @classmethod
    def from_stats(cls, stats: SMSStats) -> "SMSStatsSchema":
        return cls(
            total=stats.total,
            successful=stats.successful,
            failed=stats.failed,
            success_rate=stats.success_rate,
            latest_arrears=stats.latest_arrears,
            latest_dpd=stats.latest_dpd,
            last_sent_date=stats.last_sent_date,
        )


class AccountDetailResponse(BaseModel):
    """Response for GET /v1/accounts/{custnumber}"""

    model_config = ConfigDict(populate_by_name=True)

    account: AccountSchema
    risk_description: str = Field(alias="riskDescription")
    sms_stats: SMSStatsSchema = Field(alias="smsStats")

    @classmethod
    def build(cls, account: Account, stats: SMSStats) -> "AccountDetailResponse":
        summary = AccountSchema.from_account(account)
        return cls(
            account=summary,
            risk_description=risk_description(classify_risk(account.dpd, account.status).level),
            sms_stats=SMSStatsSchema.from_stats(stats),
        )


class NoteSchema(BaseModel):
    """notehis row"""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    custnumber: Optional[str] = None
    accnumber: Optional[str] = None
    notemade: Optional[str] = None
    owner: Optional[str] = None
    notedate: Optional[datetime] = None
    notesrc: Optional[str] = None
    noteimp: Optional[str] = None
    reason: Optional[str] = None
    reasondetails: Optional[str] = None

    @classmethod
    def from_note(cls, note: Note) -> "NoteSchema":
        return cls.model_validate(note)


class NoteCreateRequest(BaseModel):
    """Request body for POST /v1/notes"""

    custnumber: str = Field(..., min_length=1, description="Customer number")
    accnumber: Optional[str] = Field(default=None, description="Account number")
    notemade: str = Field(..., min_length=1, description="Note body")
    owner: Optional[str] = Field(default=None, description="Agent who wrote the note")
    notesrc: Optional[str] = None
    noteimp: Optional[str] = None
    reason: Optional[str] = None
    reasondetails: Optional[str] = None


class SMSLogSchema(BaseModel):
    """sms_logs row"""

    model_config = ConfigDict(from_attributes=True)

    sms_id: Optional[int] = None
    customer_number: Optional[str] = None
    phone_number: Optional[str] = None
    message: Optional[str] = None
    send_status: Optional[str] = None
    date_sent: Optional[datetime] = None
    owner: Optional[str] = None
    arrears: Optional[str] = None
    reference_number: Optional[str] = None

    @classmethod
    def from_sms_log(cls, sms: SMSLog) -> "SMSLogSchema":
        return cls.model_validate(sms)


class ChatTurn(BaseModel):
    """Prior message in the agent's conversation"""

    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Request body for POST /v1/chat"""

    custnumber: Optional[str] = Field(default=None, description="Customer the agent is working")
    message: str = Field(default="", description="Agent message; ignored for preset modes")
    history: List[ChatTurn] = Field(default_factory=list)
    mode: Literal["chat", "summary", "talking_points", "sentiment"] = "chat"


class ChatResponse(BaseModel):
    """Response for POST /v1/chat"""

    reply: str
