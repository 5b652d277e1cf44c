"""/v1/notes and /v1/search - note history endpoints"""

import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ecollect_gateway.api.v1.schemas import NoteSchema, NoteCreateRequest
from ecollect_gateway.api.dependencies import get_record_store, get_request_id
from ecollect_gateway.infrastructure.record_store import RecordStore
from ecollect_gateway.domain.exceptions import RecordStoreError

router = APIRouter()


def _unavailable(e: RecordStoreError, request_id: str) -> HTTPException:
    logging.error(f"Record store error: {e}", extra={"request_id": request_id})
    return HTTPException(status_code=503, detail="Record store unavailable")


def _internal_error(e: Exception, request_id: str) -> HTTPException:
    logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
    return HTTPException(status_code=500, detail="Internal server error")


@router.get("/notes", response_model=List[NoteSchema])
async def list_notes(
    request: Request,
    limit: int = Query(1000, ge=1, le=5000),
    offset: int = Query(0, ge=0),
    store: RecordStore = Depends(get_record_store),
):
    """One page of notes, newest first"""
    try:
        notes = await store.list_notes(limit, offset)
    except RecordStoreError as e:
        raise _unavailable(e, get_request_id(request))
    except Exception as e:
        raise _internal_error(e, get_request_id(request))
    return [NoteSchema.from_note(note) for note in notes]


@router.get("/notes/account/{accnumber}", response_model=List[NoteSchema])
async def get_account_notes(accnumber: str, request: Request, store: RecordStore = Depends(get_record_store)):
    """All notes for an account number, newest first"""
    try:
        notes = await store.fetch_account_notes(accnumber)
    except RecordStoreError as e:
        raise _unavailable(e, get_request_id(request))
    except Exception as e:
        raise _internal_error(e, get_request_id(request))
    return [NoteSchema.from_note(note) for note in notes]


@router.get("/notes/customer/{custnumber}", response_model=List[NoteSchema])
async def get_customer_notes(custnumber: str, request: Request, store: RecordStore = Depends(get_record_store)):
    """All notes for a customer, newest first"""
    try:
        notes = await store.fetch_customer_notes(custnumber)
    except RecordStoreError as e:
        raise _unavailable(e, get_request_id(request))
    except Exception as e:
        raise _internal_error(e, get_request_id(request))
    return [NoteSchema.from_note(note) for note in notes]


@router.post("/notes", response_model=NoteSchema)
async def add_note(
    request_body: NoteCreateRequest,
    request: Request,
    store: RecordStore = Depends(get_record_store),
):
    """Append a note to a customer's history"""
    request_id = get_request_id(request)
    try:
        note = await store.add_note(request_body.model_dump())
    except RecordStoreError as e:
        raise _unavailable(e, request_id)
    except Exception as e:
        raise _internal_error(e, request_id)

    logging.info(
        "Note added",
        extra={"request_id": request_id, "custnumber": note.custnumber, "note_id": note.id},
    )
    return NoteSchema.from_note(note)


@router.get("/search", response_model=List[NoteSchema])
async def search_notes(
    request: Request,
    q: str = Query("", description="Text to find in note body, reason or details"),
    store: RecordStore = Depends(get_record_store),
):
    """Case-insensitive note search, newest first, at most 50 results"""
    if not q:
        return []
    try:
        notes = await store.search_notes(q, limit=50)
    except RecordStoreError as e:
        raise _unavailable(e, get_request_id(request))
    except Exception as e:
        raise _internal_error(e, get_request_id(request))
    return [NoteSchema.from_note(note) for note in notes]
