"""
Best-effort delivery of moderation notifications.

The dispatcher only queues work; failures to queue are logged and swallowed
so that a broken broker never undoes a committed moderation decision.
"""

from __future__ import annotations

import logging

from lifecycle.errors import NotificationDeliveryFailure

logger = logging.getLogger(__name__)

POST_APPROVED = "post_approved"
POST_REJECTED = "post_rejected"
TEMPLATE_KINDS = frozenset({POST_APPROVED, POST_REJECTED})


class NotificationDispatcher:
    def notify(self, recipient: str | None, template_kind: str, payload: dict) -> bool:
        """Queue a notification; returns False when it could not be queued."""
        try:
            self._enqueue(recipient, template_kind, payload)
        except NotificationDeliveryFailure as exc:
            logger.warning(
                "notifications: %s",
                exc.detail,
                extra={"template_kind": template_kind, "recipient": recipient},
            )
            return False
        except Exception:
            logger.info(
                "notifications: could not queue %s",
                template_kind,
                exc_info=True,
                extra={"template_kind": template_kind, "recipient": recipient},
            )
            return False
        return True

    def _enqueue(self, recipient, template_kind, payload):
        from notifications.tasks import send_moderation_email

        if template_kind not in TEMPLATE_KINDS:
            raise NotificationDeliveryFailure(f"unknown template kind {template_kind!r}")
        if not recipient:
            raise NotificationDeliveryFailure("recipient has no email address")
        send_moderation_email.delay(recipient, template_kind, payload)


dispatcher = NotificationDispatcher()
