"""Record store boundary: backend protocol, pagination and concurrent source loading"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Protocol, Tuple, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from ecollect_gateway.config import settings
from ecollect_gateway.domain.exceptions import RecordStoreError
from ecollect_gateway.domain.models import Note, SMSLog
from ecollect_gateway.infrastructure.database.repositories import NoteRepository, SMSLogRepository
from ecollect_gateway.infrastructure.database.session import SessionLocal
from ecollect_gateway.infrastructure.observability.metrics import record_store_failures_counter

T = TypeVar("T")

NOTES_TABLE = "notehis"
SMS_TABLE = "sms_logs"


class RecordStore(Protocol):
    """Read/append access to notes and SMS logs, newest first"""

    async def fetch_notes(self) -> List[Note]: ...

    async def fetch_sms_logs(self) -> List[SMSLog]: ...

    async def list_notes(self, limit: int, offset: int = 0) -> List[Note]: ...

    async def list_sms_logs(self, limit: int, offset: int = 0) -> List[SMSLog]: ...

    async def fetch_customer_notes(self, custnumber: str) -> List[Note]: ...

    async def fetch_account_notes(self, accnumber: str) -> List[Note]: ...

    async def fetch_customer_sms_logs(self, customer_number: str) -> List[SMSLog]: ...

    async def search_notes(self, query: str, limit: int = 50) -> List[Note]: ...

    async def add_note(self, fields: Dict[str, Any]) -> Note: ...


async def fetch_all_pages(
    fetch_page: Callable[[int, int], Awaitable[List[T]]],
    table: str,
    page_size: int | None = None,
    max_pages: int | None = None,
) -> List[T]:
    """
    Read a whole table page by page.

    Pages are requested strictly one after another (offset, limit). Stops on
    the first page shorter than page_size, or after max_pages pages so a
    runaway table cannot page forever.
    """
    page_size = page_size or settings.page_size
    max_pages = max_pages or settings.max_pages

    rows: List[T] = []
    for page in range(max_pages):
        batch = await fetch_page(page * page_size, page_size)
        rows.extend(batch)
        logging.debug(f"Fetched {table} page {page + 1}: {len(batch)} records")
        if len(batch) < page_size:
            break
    else:
        logging.warning(
            f"Stopped paging {table} after {max_pages} pages",
            extra={"table": table, "rows": len(rows)},
        )

    logging.info(f"Total from {table}: {len(rows)} records", extra={"table": table, "rows": len(rows)})
    return rows


async def load_sources(store: RecordStore) -> Tuple[List[Note], List[SMSLog]]:
    """
    Fetch notes and SMS logs concurrently and wait for both.

    A source that fails with RecordStoreError is treated as empty so the
    account list can still be built from the other one. Raises
    RecordStoreError only when both fail; any other exception propagates.
    """
    notes_result, sms_result = await asyncio.gather(
        store.fetch_notes(),
        store.fetch_sms_logs(),
        return_exceptions=True,
    )

    failures = []
    for table, result in ((NOTES_TABLE, notes_result), (SMS_TABLE, sms_result)):
        if isinstance(result, BaseException):
            if not isinstance(result, RecordStoreError):
                raise result  # bugs and cancellation are not store outages
            record_store_failures_counter.labels(table=table).inc()
            logging.warning(f"Continuing without {table}: {result}", extra={"table": table})
            failures.append(result)

    if len(failures) == 2:
        raise RecordStoreError("Both notehis and sms_logs are unavailable") from failures[0]

    notes = [] if isinstance(notes_result, BaseException) else notes_result
    sms_logs = [] if isinstance(sms_result, BaseException) else sms_result
    return notes, sms_logs


class PostgresRecordStore:
    """
    Record store backed by direct SQL access to notehis and sms_logs.

    Every query runs in the threadpool on its own session, so blocking driver
    calls stay off the event loop and notes and SMS pages can interleave.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] | None = None,
        page_size: int | None = None,
        max_pages: int | None = None,
    ):
        self.session_factory = session_factory or SessionLocal
        self.page_size = page_size or settings.page_size
        self.max_pages = max_pages or settings.max_pages

    def _execute(self, table: str, query: Callable[[Session], T]) -> T:
        db = self.session_factory()
        try:
            return query(db)
        except SQLAlchemyError as e:
            db.rollback()
            raise RecordStoreError(f"Database error reading {table}: {e}", table=table) from e
        finally:
            db.close()

    async def _run(self, table: str, query: Callable[[Session], T]) -> T:
        return await run_in_threadpool(self._execute, table, query)

    async def list_notes(self, limit: int, offset: int = 0) -> List[Note]:
        return await self._run(NOTES_TABLE, lambda db: NoteRepository(db).list_notes(limit, offset))

    async def list_sms_logs(self, limit: int, offset: int = 0) -> List[SMSLog]:
        return await self._run(SMS_TABLE, lambda db: SMSLogRepository(db).list_sms_logs(limit, offset))

    async def fetch_notes(self) -> List[Note]:
        return await fetch_all_pages(
            lambda offset, limit: self.list_notes(limit, offset), NOTES_TABLE, self.page_size, self.max_pages
        )

    async def fetch_sms_logs(self) -> List[SMSLog]:
        return await fetch_all_pages(
            lambda offset, limit: self.list_sms_logs(limit, offset), SMS_TABLE, self.page_size, self.max_pages
        )

    async def fetch_customer_notes(self, custnumber: str) -> List[Note]:
        return await self._run(NOTES_TABLE, lambda db: NoteRepository(db).get_notes_by_customer(custnumber))

    async def fetch_account_notes(self, accnumber: str) -> List[Note]:
        return await self._run(NOTES_TABLE, lambda db: NoteRepository(db).get_notes_by_account(accnumber))

    async def fetch_customer_sms_logs(self, customer_number: str) -> List[SMSLog]:
        return await self._run(
            SMS_TABLE, lambda db: SMSLogRepository(db).get_sms_logs_by_customer(customer_number)
        )

    async def search_notes(self, query: str, limit: int = 50) -> List[Note]:
        return await self._run(NOTES_TABLE, lambda db: NoteRepository(db).search_notes(query, limit))

    async def add_note(self, fields: Dict[str, Any]) -> Note:
        def create(db: Session) -> Note:
            note = NoteRepository(db).create_note(fields)
            db.commit()
            return note

        return await self._run(NOTES_TABLE, create)
