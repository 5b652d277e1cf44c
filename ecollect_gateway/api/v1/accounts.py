"""GET /v1/accounts - aggregated collections accounts"""

import time
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request

from ecollect_gateway.api.v1.schemas import AccountSchema, AccountDetailResponse
from ecollect_gateway.api.dependencies import get_record_store, get_request_id
from ecollect_gateway.infrastructure.record_store import RecordStore, load_sources
from ecollect_gateway.domain.aggregation import aggregate_accounts, summarize_sources
from ecollect_gateway.domain.extraction import get_sms_stats
from ecollect_gateway.domain.exceptions import AccountNotFoundError, RecordStoreError
from ecollect_gateway.infrastructure.observability.metrics import aggregation_duration_histogram, record_accounts
from ecollect_gateway.infrastructure.observability.logging import log_accounts_loaded

router = APIRouter()


@router.get("/accounts", response_model=List[AccountSchema])
async def list_accounts(
    request: Request,
    store: RecordStore = Depends(get_record_store),
):
    """
    Aggregate every customer seen in notehis and sms_logs.

    Flow:
    1. Fetch both tables concurrently (a failed table counts as empty)
    2. Group by customer and derive DPD, status and source
    3. Return accounts ordered by DPD, highest first
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        with aggregation_duration_histogram.time():
            notes, sms_logs = await load_sources(store)
            accounts = aggregate_accounts(notes, sms_logs)

    except RecordStoreError as e:
        logging.error(f"Record store error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Record store unavailable")

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_accounts(accounts)
    log_accounts_loaded(request_id, summarize_sources(accounts), len(notes), len(sms_logs), duration_ms)

    return [AccountSchema.from_account(account) for account in accounts]


@router.get("/accounts/{custnumber}", response_model=AccountDetailResponse)
async def get_account(
    custnumber: str,
    request: Request,
    store: RecordStore = Depends(get_record_store),
):
    """
    Rebuild a single account from its customer's notes and SMS logs.

    Returns:
        Account with risk guidance and SMS delivery statistics
    """
    request_id = get_request_id(request)

    try:
        notes = await store.fetch_customer_notes(custnumber)
        try:
            sms_logs = await store.fetch_customer_sms_logs(custnumber)
        except RecordStoreError as e:
            logging.warning(f"Continuing without sms_logs: {e}", extra={"request_id": request_id})
            sms_logs = []

        accounts = aggregate_accounts(notes, sms_logs)
        if not accounts:
            raise AccountNotFoundError(f"No records for customer {custnumber}")

    except AccountNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    except RecordStoreError as e:
        logging.error(f"Record store error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Record store unavailable")

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return AccountDetailResponse.build(accounts[0], get_sms_stats(sms_logs))
