from __future__ import annotations

"""
Chat Session Service.

Headless counterpart of the chat window: owns the single current tree and
the message history, runs each submitted instruction through the classifier
and the reconciliation engine, and records the reply that an interface
would display (summary-only tree JSON, or an error line).
"""

import json
import logging
import threading
from dataclasses import dataclass
from typing import List, Optional

from treesync4ai.core.classifier import classify
from treesync4ai.core.reconcile.engine import reconcile
from treesync4ai.core.tree.projector import project_summary_only
from treesync4ai.domain.errors import ReconcileError
from treesync4ai.domain.gateway import RepositoryGateway
from treesync4ai.domain.reconcile_models import ReconcileResult
from treesync4ai.domain.tree_models import DirectoryNode, tree_to_dict
from treesync4ai.utils.i18n import i18n

logger = logging.getLogger(__name__)

ROLE_USER = "user"
ROLE_SYSTEM = "system"


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str


class ChatSession:
    """
    Sequential instruction processor for one user.

    One instruction is fully reconciled before the next is accepted; the
    session is not meant to be shared between threads.
    """

    def __init__(
            self,
            gateway: Optional[RepositoryGateway] = None,
            tree: Optional[DirectoryNode] = None,
    ):
        self.gateway = gateway
        self.tree = tree
        self.messages: List[ChatMessage] = []

    def send(
            self,
            text: str,
            cancellation_event: Optional[threading.Event] = None,
    ) -> Optional[ReconcileResult]:
        """
        Submit raw user text.

        Args:
            text: Instruction as typed by the user.
            cancellation_event: Optional flag to abort pending remote calls.

        Returns:
            Optional[ReconcileResult]: The result, or None if the input was blank.
        """
        trimmed = (text or "").strip()
        if not trimmed:
            return None

        self.messages.append(ChatMessage(ROLE_USER, trimmed))

        instruction = classify(trimmed)
        result = reconcile(instruction, self.tree, self.gateway, cancellation_event=cancellation_event)

        if result.ok:
            self.tree = result.tree
            reply = render_summary_json(result.tree)
            logger.info(f"Session: instruction applied ({result.resolution.value}).")
        else:
            reply = f"{i18n.t('chat.error_prefix', default='Error')}: {format_error(result.error)}"

        self.messages.append(ChatMessage(ROLE_SYSTEM, reply))
        return result


def render_summary_json(tree: Optional[DirectoryNode]) -> str:
    """JSON of the summary-only projection, as shown after every successful update."""
    if tree is None:
        return "null"
    return json.dumps(tree_to_dict(project_summary_only(tree)), ensure_ascii=False, indent=2)


def format_error(error: Optional[ReconcileError]) -> str:
    """Localized, plain-text rendering of a reconciliation error."""
    if error is None:
        return ""
    return i18n.t(error.message_key, default=str(error), detail=error.detail or error.kind)
