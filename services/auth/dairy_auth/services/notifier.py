from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResetRequest:
    user_id: str
    email: str
    requested_at: datetime


class ResetNotifier(Protocol):
    def send(self, request: ResetRequest) -> None: ...


class LogResetNotifier:
    """Records reset requests without delivering anything.

    Reset-token issuance and email delivery belong to a separate collaborator;
    swap this out via ``create_app(reset_notifier=...)`` once one exists.
    """

    def send(self, request: ResetRequest) -> None:
        logger.info('Password reset requested for user %s at %s', request.user_id, request.requested_at.isoformat())
