"""Scripted assistant replies.

The reply text comes from a pluggable ``ReplyGenerator``; quota notices for
anonymous sessions take precedence over whatever the generator would say.
"""
from __future__ import annotations

import asyncio
import logging
import random
from typing import NamedTuple, Protocol

from medfinder.config import Settings
from medfinder.metrics import chat_messages_total
from medfinder.services import chat_log
from medfinder.services.identity import Identity

logger = logging.getLogger(__name__)
settings = Settings()

CANNED_REPLIES = (
    "I can help you find that medication. Let me search for nearby pharmacies.",
    "Would you like me to check the availability at different locations?",
    "I found several options for you. Which pharmacy would you prefer?",
    "Is there anything specific you'd like to know about this medication?",
)

QUOTA_WARNING_REPLY = (
    "Heads up: you have 1 free chat left this week. "
    "Sign in for unlimited chats with MedFinder."
)
QUOTA_EXHAUSTED_REPLY = (
    "That was your last free chat this week. "
    "Sign in to keep chatting, or come back next week."
)
QUOTA_REJECTED_REPLY = (
    "You've used all your free chats for this week. "
    "Please sign in to continue the conversation."
)


class ReplyContext(NamedTuple):
    identity: Identity
    message: str
    remaining: int | None  # chats left after this one; None for accounts


class ReplyGenerator(Protocol):
    def next_reply(self, context: ReplyContext) -> str:
        ...


class CannedReplyGenerator:
    """Picks one of a fixed set of replies uniformly at random."""

    def __init__(self, replies=CANNED_REPLIES, rng: random.Random | None = None) -> None:
        if not replies:
            raise ValueError("at least one canned reply is required")
        self.replies = tuple(replies)
        self._rng = rng or random.Random()

    def next_reply(self, context: ReplyContext) -> str:
        return self._rng.choice(self.replies)


_generator: ReplyGenerator = CannedReplyGenerator()


def get_reply_generator() -> ReplyGenerator:
    return _generator


def set_reply_generator(generator: ReplyGenerator) -> None:
    global _generator
    _generator = generator


def choose_reply(context: ReplyContext, generator: ReplyGenerator | None = None) -> str:
    if context.remaining == 0:
        return QUOTA_EXHAUSTED_REPLY
    if context.remaining == 1:
        return QUOTA_WARNING_REPLY
    return (generator or _generator).next_reply(context)


def reply_delay() -> float:
    low = max(0.0, settings.bot_reply_delay_min)
    high = max(low, settings.bot_reply_delay_max)
    return random.uniform(low, high)


async def send_bot_reply(context: ReplyContext, delay: float | None = None) -> None:
    """Append the follow-up bot message after the scripted delay."""
    await asyncio.sleep(reply_delay() if delay is None else delay)
    text = choose_reply(context)
    await asyncio.to_thread(chat_log.append_sync, context.identity, text, True)
    chat_messages_total.labels(author="bot").inc()
    logger.info("bot_reply identity=%s remaining=%s", context.identity.key, context.remaining)


__all__ = [
    "CANNED_REPLIES",
    "QUOTA_WARNING_REPLY",
    "QUOTA_EXHAUSTED_REPLY",
    "QUOTA_REJECTED_REPLY",
    "ReplyContext",
    "ReplyGenerator",
    "CannedReplyGenerator",
    "get_reply_generator",
    "set_reply_generator",
    "choose_reply",
    "reply_delay",
    "send_bot_reply",
]
