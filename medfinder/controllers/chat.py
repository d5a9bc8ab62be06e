import asyncio
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from pydantic import Field

from medfinder.config import Settings
from medfinder.dependencies import ErrorResponse, client_ip, rate_limit
from medfinder.exceptions import QuotaExceededError, ValidationError
from medfinder.metrics import chat_messages_total, quota_reject_total
from medfinder.schemas import CamelModel, ChatMessageOut, QuotaOut
from medfinder.services import bot, chat_log, quota
from medfinder.services.identity import Identity

router = APIRouter(prefix="/chat", tags=["chat"])
logger = logging.getLogger(__name__)
settings = Settings()


class ChatSendRequest(CamelModel):
    message: str = Field(min_length=1, max_length=2000)


class ChatSendResponse(CamelModel):
    message: ChatMessageOut
    quota: QuotaOut


def _quota_out(status: quota.QuotaStatus) -> QuotaOut:
    return QuotaOut(
        unlimited=status.unlimited,
        remaining_chats=status.remaining_chats,
        is_limit_reached=status.is_limit_reached,
        week_start=status.week_start,
    )


@router.get("/messages", response_model=list[ChatMessageOut])
async def list_messages(
    limit: int = Query(settings.chat_history_limit, ge=0, le=200),
    identity: Identity = Depends(rate_limit),
):
    """Newest first; clients reverse for display."""
    rows = await asyncio.to_thread(chat_log.list_sync, identity, limit)
    return [ChatMessageOut.model_validate(r) for r in rows]


@router.post(
    "/messages",
    status_code=201,
    response_model=ChatSendResponse,
    responses={400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
)
async def send_message(
    body: ChatSendRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    identity: Identity = Depends(rate_limit),
):
    text = body.message.strip()
    if not text:
        raise ValidationError("message is required")

    usage = await asyncio.to_thread(
        quota.consume_chat_sync, identity, client_ip(request)
    )
    if not usage.accepted:
        quota_reject_total.inc()
        await asyncio.to_thread(
            chat_log.append_sync, identity, bot.QUOTA_REJECTED_REPLY, True
        )
        logger.info("chat_rejected identity=%s count=%s", identity.key, usage.count)
        raise QuotaExceededError()

    message = await asyncio.to_thread(chat_log.append_sync, identity, text, False)
    chat_messages_total.labels(author="user").inc()
    background_tasks.add_task(
        bot.send_bot_reply, bot.ReplyContext(identity, text, usage.remaining)
    )

    if identity.is_account:
        status = quota.QuotaStatus(True, None, False, None)
    else:
        status = quota.QuotaStatus(
            unlimited=False,
            remaining_chats=usage.remaining,
            is_limit_reached=usage.remaining == 0,
            week_start=usage.week_start,
        )
    return ChatSendResponse(
        message=ChatMessageOut.model_validate(message),
        quota=_quota_out(status),
    )


@router.get("/quota", response_model=QuotaOut)
async def get_quota(identity: Identity = Depends(rate_limit)):
    status = await asyncio.to_thread(quota.quota_status_sync, identity)
    return _quota_out(status)
