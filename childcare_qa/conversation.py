"""
Conversation round trip for the chat page.

Public entry point:
- ConversationService.send(session, form=None) -> Message   # the assistant reply appended to the log
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from childcare_qa.client import ChildcareAPIClient
from childcare_qa.intents import intent_value
from childcare_qa.messages import Message
from childcare_qa.normalizer import network_error_message, normalize_response
from childcare_qa.request_builder import FormState, ValidationRefusal, build_chat_request
from childcare_qa.state import ChatSession

logger = logging.getLogger(__name__)

Transport = Callable[[Dict[str, Any]], Any]


class ConversationService:
    """Runs one submission of the chat form against the backend.

    `transport` takes the wire payload and returns the decoded JSON reply;
    it defaults to ChildcareAPIClient.chat. Any exception it raises is
    recorded as a Network message on the turn it belongs to.
    """

    def __init__(
        self,
        client: Optional[ChildcareAPIClient] = None,
        *,
        transport: Optional[Transport] = None,
    ) -> None:
        if transport is None:
            client = client or ChildcareAPIClient()
            transport = client.chat
        self.client = client
        self.transport = transport

    def send(self, session: ChatSession, form: Optional[FormState] = None) -> Message:
        """Submit a form against the session's message log.

        `form` is the state captured for this submission; it defaults to
        `session.form`. The request is built from it before anything else
        touches the session, so overlapping submissions each carry their own
        query.

        Raises ValidationRefusal (before anything is appended or sent) when
        the form has no usable query. Otherwise the user message is appended
        immediately and the assistant message when the reply resolves.
        """
        form = form if form is not None else session.form
        request = build_chat_request(form)
        payload = request.to_payload()
        intent = intent_value(form.intent)

        session.loading = True
        turn = session.store.append_pending(Message.from_user(request.query))
        form.query = ""
        try:
            try:
                reply = self.transport(payload)
            except Exception as e:
                logger.warning("chat round trip failed (intent=%s): %r", intent, e)
                message = network_error_message(e)
            else:
                message = normalize_response(reply)
            session.store.resolve(turn, message)
            logger.info(
                "chat turn resolved: intent=%s outcome=%s providers=%s",
                intent,
                message.outcome.value,
                len(message.providers or ()),
            )
            return message
        finally:
            session.loading = False


def submit(session: ChatSession, service: Optional[ConversationService] = None) -> Optional[Message]:
    """Send unless the form is refused; refusals return None and send nothing."""
    try:
        return (service or ConversationService()).send(session)
    except ValidationRefusal as e:
        logger.info("submission refused: %s", e)
        return None
