"""Data access layer for notes and SMS logs"""

from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ecollect_gateway.infrastructure.database.models import NoteHistoryRow, SMSLogRow
from ecollect_gateway.domain.models import Note, SMSLog


def to_note(row: NoteHistoryRow) -> Note:
    """Map a notehis row to the domain Note"""
    return Note(
        id=row.id,
        custnumber=row.custnumber,
        accnumber=row.accnumber,
        notemade=row.notemade,
        owner=row.owner,
        notedate=row.notedate,
        notesrc=row.notesrc,
        noteimp=row.noteimp,
        reason=row.reason,
        reasondetails=row.reasondetails,
    )


def to_sms_log(row: SMSLogRow) -> SMSLog:
    """Map an sms_logs row to the domain SMSLog"""
    return SMSLog(
        sms_id=row.sms_id,
        customer_number=row.customer_number,
        message=row.message,
        send_status=row.send_status,
        date_sent=row.date_sent,
        phone_number=row.phone_number,
        owner=row.owner,
        arrears=row.arrears,
        reference_number=row.reference_number,
    )


class NoteRepository:
    """Repository for the notehis table"""

    def __init__(self, db: Session):
        self.db = db

    def _newest_first(self):
        return self.db.query(NoteHistoryRow).order_by(
            NoteHistoryRow.notedate.desc().nulls_last(), NoteHistoryRow.id.desc()
        )

    def list_notes(self, limit: int, offset: int = 0) -> List[Note]:
        """One page of notes, newest first"""
        return [to_note(row) for row in self._newest_first().offset(offset).limit(limit).all()]

    def get_notes_by_customer(self, custnumber: str) -> List[Note]:
        """All notes for a customer, newest first"""
        rows = self._newest_first().filter(NoteHistoryRow.custnumber == custnumber).all()
        return [to_note(row) for row in rows]

    def get_notes_by_account(self, accnumber: str) -> List[Note]:
        """All notes for an account number, newest first"""
        rows = self._newest_first().filter(NoteHistoryRow.accnumber == accnumber).all()
        return [to_note(row) for row in rows]

    def search_notes(self, query: str, limit: int = 50) -> List[Note]:
        """Case-insensitive substring search over note body, reason and details"""
        pattern = f"%{query}%"
        rows = (
            self._newest_first()
            .filter(
                or_(
                    NoteHistoryRow.notemade.ilike(pattern),
                    NoteHistoryRow.reason.ilike(pattern),
                    NoteHistoryRow.reasondetails.ilike(pattern),
                )
            )
            .limit(limit)
            .all()
        )
        return [to_note(row) for row in rows]

    def create_note(self, fields: Dict[str, Any]) -> Note:
        """Append a note; ids are allocated as max(id) + 1 like the upstream console"""
        next_id = (self.db.query(func.coalesce(func.max(NoteHistoryRow.id), 0)).scalar() or 0) + 1

        db_note = NoteHistoryRow(
            id=next_id,
            custnumber=fields.get("custnumber"),
            accnumber=fields.get("accnumber"),
            notemade=fields.get("notemade"),
            owner=fields.get("owner"),
            notedate=datetime.now(timezone.utc),
            notesrc=fields.get("notesrc") or "Manual Entry",
            noteimp=fields.get("noteimp") or "Normal",
            reason=fields.get("reason"),
            reasondetails=fields.get("reasondetails"),
        )
        self.db.add(db_note)
        self.db.flush()  # Surface constraint errors before commit
        return to_note(db_note)


class SMSLogRepository:
    """Repository for the sms_logs table"""

    def __init__(self, db: Session):
        self.db = db

    def _newest_first(self):
        return self.db.query(SMSLogRow).order_by(
            SMSLogRow.date_sent.desc().nulls_last(), SMSLogRow.sms_id.desc()
        )

    def list_sms_logs(self, limit: int, offset: int = 0) -> List[SMSLog]:
        """One page of SMS logs, newest first"""
        return [to_sms_log(row) for row in self._newest_first().offset(offset).limit(limit).all()]

    def get_sms_logs_by_customer(self, customer_number: str) -> List[SMSLog]:
        """All SMS logs for a customer, newest first"""
        rows = self._newest_first().filter(SMSLogRow.customer_number == customer_number).all()
        return [to_sms_log(row) for row in rows]
