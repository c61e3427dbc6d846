from __future__ import annotations

import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template import TemplateDoesNotExist
from django.template.loader import render_to_string

from notifications.models import NotificationLog

logger = logging.getLogger(__name__)

SUBJECTS = {
    "post_approved": "Your post has been approved",
    "post_rejected": "Your post was not approved",
}


def _render(template: str, context: dict) -> str:
    """Render a template relative to the notifications app."""
    return render_to_string(template, context).strip()


def _build_email_context(extra: dict | None) -> dict:
    frontend_origin = (getattr(settings, "FRONTEND_ORIGIN", "") or "").rstrip("/")
    context = {
        "site_name": getattr(settings, "SITE_NAME", "Baytino"),
        "site_url": frontend_origin,
        "brand_primary_color": getattr(settings, "SITE_PRIMARY_COLOR", "#2563EB"),
    }
    if extra:
        context.update(extra)
    post_id = context.get("post_id")
    if post_id is not None and "post_url" not in context:
        context["post_url"] = f"{frontend_origin}/posts/{post_id}"
    return context


def _prepare_email_bodies(subject: str, template: str, context: dict | None) -> tuple[str, str | None]:
    context_with_brand = _build_email_context(context or {})
    context_with_brand["subject"] = subject
    body = _render(f"email/{template}.txt", context_with_brand)
    try:
        html_body = _render(f"email/{template}.html", context_with_brand)
    except TemplateDoesNotExist:
        html_body = None
    return body, html_body


def _log_notification(
    type_: str,
    status: str,
    *,
    recipient: str | None = None,
    user_id: int | None = None,
    error: str | None = None,
) -> None:
    try:
        NotificationLog.objects.create(
            channel=NotificationLog.Channel.EMAIL,
            type=type_,
            status=status,
            recipient=recipient or "",
            user_id=user_id,
            error=error or "",
        )
    except Exception:
        logger.exception(
            "notifications: failed to persist notification log",
            extra={"type": type_, "status": status},
        )


def _send_email_logged(
    type_: str,
    *,
    to_email: str | None,
    subject: str,
    template: str,
    context: dict | None = None,
    user_id: int | None = None,
) -> bool:
    if not to_email:
        _log_notification(
            type_,
            NotificationLog.Status.FAILED,
            user_id=user_id,
            error="missing recipient email",
        )
        logger.warning("notifications: cannot send email without recipient")
        return False

    text_body, html_body = _prepare_email_bodies(subject, template, context)
    message = EmailMultiAlternatives(
        subject=subject,
        body=text_body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[to_email],
    )
    if html_body:
        message.attach_alternative(html_body, "text/html")

    try:
        message.send(fail_silently=False)
    except Exception as exc:
        logger.exception(
            "notifications: email send failed",
            extra={"type": type_, "user_id": user_id},
        )
        _log_notification(
            type_,
            NotificationLog.Status.FAILED,
            recipient=to_email,
            user_id=user_id,
            error=str(exc) or exc.__class__.__name__,
        )
        return False

    _log_notification(type_, NotificationLog.Status.SENT, recipient=to_email, user_id=user_id)
    return True


@shared_task(queue="emails")
def send_moderation_email(to_email: str, template_kind: str, payload: dict):
    """Email the owner of a post about an approve/reject decision."""
    context = dict(payload or {})
    subject = SUBJECTS.get(template_kind, "Update on your post")
    return _send_email_logged(
        template_kind,
        to_email=to_email,
        subject=f"{subject} - {settings.SITE_NAME}",
        template=template_kind,
        context=context,
        user_id=context.get("user_id"),
    )
