"""Supabase (PostgREST) HTTP client for notehis and sms_logs"""

import asyncio
import logging
import httpx
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from ecollect_gateway.config import settings
from ecollect_gateway.domain.models import Note, SMSLog
from ecollect_gateway.domain.exceptions import RecordStoreError
from ecollect_gateway.infrastructure.record_store import NOTES_TABLE, SMS_TABLE, fetch_all_pages
from ecollect_gateway.utils.date_utils import parse_timestamp

NOTES_ORDER = "notedate.desc.nullslast,id.desc"
SMS_ORDER = "date_sent.desc.nullslast,sms_id.desc"


def _text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def postgrest_quote(value: str) -> str:
    """Double-quote a filter value so commas and parentheses stay literal"""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def parse_note(row: Dict[str, Any]) -> Note:
    """Map a PostgREST notehis row to the domain Note"""
    return Note(
        id=row.get("id"),
        custnumber=_text(row.get("custnumber")),
        accnumber=_text(row.get("accnumber")),
        notemade=row.get("notemade"),
        owner=row.get("owner"),
        notedate=parse_timestamp(row.get("notedate")),
        notesrc=row.get("notesrc"),
        noteimp=row.get("noteimp"),
        reason=row.get("reason"),
        reasondetails=row.get("reasondetails"),
    )


def parse_sms_log(row: Dict[str, Any]) -> SMSLog:
    """Map a PostgREST sms_logs row to the domain SMSLog"""
    return SMSLog(
        sms_id=row.get("sms_id"),
        customer_number=_text(row.get("customer_number")),
        message=row.get("message"),
        send_status=row.get("send_status"),
        date_sent=parse_timestamp(row.get("date_sent")),
        phone_number=_text(row.get("phone_number")),
        owner=row.get("owner"),
        arrears=_text(row.get("arrears")),
        reference_number=_text(row.get("reference_number")),
    )


class SupabaseRecordStore:
    """Record store backed by the Supabase REST API"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self.api_key = api_key or settings.supabase_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.store_max_retries
        self.backoff_base = backoff_base if backoff_base is not None else settings.store_backoff_base
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self.base_url}/rest/v1",
            headers={"apikey": self.api_key, "Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
            transport=self.transport,
        )

    async def _request(
        self,
        method: str,
        table: str,
        params: Dict[str, Any] | None = None,
        json: Any = None,
        headers: Dict[str, str] | None = None,
    ) -> List[Dict[str, Any]]:
        """
        Call PostgREST with retry on transient failures.

        Retry strategy:
        - Exponential backoff: base, 2*base, 4*base, ...
        - Retries on 5xx errors and network failures, never on 4xx

        Raises:
            RecordStoreError: On exhausted retries, client errors, or non-list payloads
        """
        attempt = 0
        async with self._client() as client:
            while True:
                try:
                    response = await client.request(method, f"/{table}", params=params, json=json, headers=headers)
                    response.raise_for_status()
                    data = response.json()
                    if not isinstance(data, list):
                        raise RecordStoreError(f"Unexpected {table} payload from Supabase", table=table)
                    return data

                except httpx.HTTPStatusError as e:
                    if e.response.status_code < 500:
                        raise RecordStoreError(
                            f"Supabase error on {table}: {e.response.status_code}", table=table
                        ) from e
                    error: Exception = e
                except httpx.RequestError as e:
                    error = e
                except ValueError as e:
                    raise RecordStoreError(f"Invalid JSON from Supabase for {table}: {e}", table=table) from e

                attempt += 1
                if attempt > self.max_retries:
                    raise RecordStoreError(
                        f"Supabase unavailable for {table} after {attempt} attempts: {error}", table=table
                    ) from error

                backoff = self.backoff_base * (2 ** (attempt - 1))
                logging.warning(f"Retrying {table} request in {backoff}s: {error}", extra={"table": table})
                await asyncio.sleep(backoff)

    async def _notes(self, params: Dict[str, Any]) -> List[Note]:
        rows = await self._request("GET", NOTES_TABLE, params={"select": "*", "order": NOTES_ORDER, **params})
        try:
            return [parse_note(row) for row in rows]
        except (AttributeError, TypeError) as e:
            raise RecordStoreError(f"Invalid notehis data from Supabase: {e}", table=NOTES_TABLE) from e

    async def _sms_logs(self, params: Dict[str, Any]) -> List[SMSLog]:
        rows = await self._request("GET", SMS_TABLE, params={"select": "*", "order": SMS_ORDER, **params})
        try:
            return [parse_sms_log(row) for row in rows]
        except (AttributeError, TypeError) as e:
            raise RecordStoreError(f"Invalid sms_logs data from Supabase: {e}", table=SMS_TABLE) from e

    async def list_notes(self, limit: int, offset: int = 0) -> List[Note]:
        return await self._notes({"limit": limit, "offset": offset})

    async def list_sms_logs(self, limit: int, offset: int = 0) -> List[SMSLog]:
        return await self._sms_logs({"limit": limit, "offset": offset})

    async def fetch_notes(self) -> List[Note]:
        return await fetch_all_pages(lambda offset, limit: self.list_notes(limit, offset), NOTES_TABLE)

    async def fetch_sms_logs(self) -> List[SMSLog]:
        return await fetch_all_pages(lambda offset, limit: self.list_sms_logs(limit, offset), SMS_TABLE)

    async def fetch_customer_notes(self, custnumber: str) -> List[Note]:
        return await self._notes({"custnumber": f"eq.{custnumber}"})

    async def fetch_account_notes(self, accnumber: str) -> List[Note]:
        return await self._notes({"accnumber": f"eq.{accnumber}"})

    async def fetch_customer_sms_logs(self, customer_number: str) -> List[SMSLog]:
        return await self._sms_logs({"customer_number": f"eq.{customer_number}"})

    async def search_notes(self, query: str, limit: int = 50) -> List[Note]:
        term = postgrest_quote(f"*{query}*")
        return await self._notes(
            {
                "or": f"(notemade.ilike.{term},reason.ilike.{term},reasondetails.ilike.{term})",
                "limit": limit,
            }
        )

    async def add_note(self, fields: Dict[str, Any]) -> Note:
        """Append a note with id max(id) + 1 and the current timestamp"""
        latest = await self._request("GET", NOTES_TABLE, params={"select": "id", "order": "id.desc", "limit": 1})
        next_id = (latest[0].get("id") or 0) + 1 if latest else 1

        payload = {
            "id": next_id,
            "custnumber": fields.get("custnumber"),
            "accnumber": fields.get("accnumber"),
            "notemade": fields.get("notemade"),
            "owner": fields.get("owner"),
            "notedate": datetime.now(timezone.utc).isoformat(),
            "notesrc": fields.get("notesrc") or "Manual Entry",
            "noteimp": fields.get("noteimp") or "Normal",
            "reason": fields.get("reason"),
            "reasondetails": fields.get("reasondetails"),
        }
        rows = await self._request(
            "POST", NOTES_TABLE, json=[payload], headers={"Prefer": "return=representation"}
        )
        if not rows:
            raise RecordStoreError("Supabase did not return the inserted note", table=NOTES_TABLE)
        return parse_note(rows[0])
