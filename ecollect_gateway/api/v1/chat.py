"""POST /v1/chat - account-aware collections assistant"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from ecollect_gateway.api.v1.schemas import ChatRequest, ChatResponse
from ecollect_gateway.api.dependencies import get_llm_client, get_record_store, get_request_id
from ecollect_gateway.infrastructure.record_store import RecordStore
from ecollect_gateway.infrastructure.clients.llm import LLMClient
from ecollect_gateway.domain.aggregation import aggregate_accounts
from ecollect_gateway.domain.context import PRESET_PROMPTS, build_account_context, build_chat_messages
from ecollect_gateway.domain.exceptions import LLMServiceError, RecordStoreError
from ecollect_gateway.infrastructure.observability.logging import log_chat_completed

router = APIRouter()


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request_body: ChatRequest,
    request: Request,
    store: RecordStore = Depends(get_record_store),
    llm_client: LLMClient = Depends(get_llm_client),
):
    """
    Answer an agent's question with the customer's history as context.

    Flow:
    1. Load the customer's notes and SMS logs (if a customer is selected)
    2. Rebuild the account and render the context block
    3. Send system prompt, context, prior turns and the message to the assistant
    """
    start_time = time.time()
    request_id = get_request_id(request)

    if request_body.mode == "chat":
        user_message = request_body.message
        history = [turn.model_dump() for turn in request_body.history]
    else:
        # Presets start a fresh conversation
        user_message = PRESET_PROMPTS[request_body.mode]
        history = []
    if not user_message.strip():
        raise HTTPException(status_code=422, detail="Message must not be empty")

    notes, sms_logs, account = [], [], None
    if request_body.custnumber:
        try:
            notes = await store.fetch_customer_notes(request_body.custnumber)
            sms_logs = await store.fetch_customer_sms_logs(request_body.custnumber)
        except RecordStoreError as e:
            # The assistant can still answer without history
            logging.warning(f"Chat context unavailable: {e}", extra={"request_id": request_id})
        except Exception as e:
            logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
            raise HTTPException(status_code=500, detail="Internal server error")
        accounts = aggregate_accounts(notes, sms_logs)
        account = accounts[0] if accounts else None

    context = build_account_context(account, notes, sms_logs)
    messages = build_chat_messages(user_message, context, history)

    try:
        reply = await llm_client.complete(messages)
    except LLMServiceError as e:
        logging.error(f"Assistant error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=502, detail="Assistant unavailable")
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    log_chat_completed(request_id, request_body.custnumber, request_body.mode, duration_ms)

    return ChatResponse(reply=reply)
