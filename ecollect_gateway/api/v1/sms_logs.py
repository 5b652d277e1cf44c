"""/v1/sms_logs - SMS delivery log endpoints"""

import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ecollect_gateway.api.v1.schemas import SMSLogSchema, SMSStatsSchema
from ecollect_gateway.api.dependencies import get_record_store, get_request_id
from ecollect_gateway.infrastructure.record_store import RecordStore
from ecollect_gateway.domain.extraction import get_sms_stats
from ecollect_gateway.domain.exceptions import RecordStoreError

router = APIRouter()


@router.get("/sms_logs", response_model=List[SMSLogSchema])
async def list_sms_logs(
    request: Request,
    limit: int = Query(1000, ge=1, le=5000),
    offset: int = Query(0, ge=0),
    store: RecordStore = Depends(get_record_store),
):
    """One page of SMS logs, newest first"""
    try:
        sms_logs = await store.list_sms_logs(limit, offset)
    except RecordStoreError as e:
        logging.error(f"Record store error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Record store unavailable")
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")
    return [SMSLogSchema.from_sms_log(sms) for sms in sms_logs]


@router.get("/sms_logs/customer/{customer_number}", response_model=List[SMSLogSchema])
async def get_customer_sms_logs(
    customer_number: str,
    request: Request,
    store: RecordStore = Depends(get_record_store),
):
    """
    All SMS logs for a customer, newest first.

    SMS history is supplementary, so a store failure yields an empty list.
    """
    try:
        sms_logs = await store.fetch_customer_sms_logs(customer_number)
    except RecordStoreError as e:
        logging.warning(f"SMS logs unavailable: {e}", extra={"request_id": get_request_id(request)})
        sms_logs = []
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")
    return [SMSLogSchema.from_sms_log(sms) for sms in sms_logs]


@router.get("/sms_logs/customer/{customer_number}/stats", response_model=SMSStatsSchema)
async def get_customer_sms_stats(
    customer_number: str,
    request: Request,
    store: RecordStore = Depends(get_record_store),
):
    """Delivery rate, latest arrears and latest DPD mentioned in a customer's SMS"""
    try:
        sms_logs = await store.fetch_customer_sms_logs(customer_number)
    except RecordStoreError as e:
        logging.error(f"Record store error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Record store unavailable")
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")
    return SMSStatsSchema.from_stats(get_sms_stats(sms_logs))
