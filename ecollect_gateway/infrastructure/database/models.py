"""SQLAlchemy ORM models for the upstream collections tables"""

from sqlalchemy import Column, Integer, Text, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class NoteHistoryRow(Base):
    """Agent interaction note (append-only)"""

    __tablename__ = "notehis"

    id = Column(Integer, primary_key=True, autoincrement=False)
    custnumber = Column(Text, nullable=True, index=True)
    accnumber = Column(Text, nullable=True, index=True)
    notemade = Column(Text, nullable=True)
    owner = Column(Text, nullable=True)
    notedate = Column(DateTime(timezone=True), nullable=True)
    notesrc = Column(Text, nullable=True)
    noteimp = Column(Text, nullable=True)
    reason = Column(Text, nullable=True)
    reasondetails = Column(Text, nullable=True)


class SMSLogRow(Base):
    """Outbound SMS record written by the SMS gateway"""

    __tablename__ = "sms_logs"

    sms_id = Column(Integer, primary_key=True)
    message = Column(Text, nullable=True)
    owner = Column(Text, nullable=True)
    customer_number = Column(Text, nullable=True, index=True)
    date_sent = Column(DateTime(timezone=True), nullable=True)
    send_status = Column(Text, nullable=True)
    arrears = Column(Text, nullable=True)
    phone_number = Column(Text, nullable=True)
    stage_date = Column(DateTime(timezone=True), nullable=True)
    reference_number = Column(Text, nullable=True)
    extra = Column(Text, nullable=True)
