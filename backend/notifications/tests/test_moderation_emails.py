import pytest
from django.core import mail

from notifications import tasks
from notifications.dispatcher import NotificationDispatcher
from notifications.models import NotificationLog

pytestmark = pytest.mark.django_db


def payload(**overrides):
    data = {
        "user_id": None,
        "user_name": "Omar",
        "post_id": 42,
        "post_title": "Room near campus",
        "admin_note": "",
    }
    data.update(overrides)
    return data


def test_approved_email_renders_and_logs(settings):
    settings.FRONTEND_ORIGIN = "https://baytino.test"

    sent = tasks.send_moderation_email("omar@example.com", "post_approved", payload(admin_note="Nice"))

    assert sent is True
    assert len(mail.outbox) == 1
    message = mail.outbox[0]
    assert message.to == ["omar@example.com"]
    assert message.subject.startswith("Your post has been approved")
    assert "Room near campus" in message.body
    assert "Nice" in message.body
    assert "https://baytino.test/posts/42" in message.body
    html, mime = message.alternatives[0]
    assert mime == "text/html"
    assert "Room near campus" in html

    log = NotificationLog.objects.get()
    assert log.status == NotificationLog.Status.SENT
    assert log.type == "post_approved"
    assert log.recipient == "omar@example.com"


def test_rejected_email_includes_reason():
    tasks.send_moderation_email("omar@example.com", "post_rejected", payload(admin_note="Blurry photos"))

    message = mail.outbox[0]
    assert message.subject.startswith("Your post was not approved")
    assert "Reason: Blurry photos" in message.body


def test_email_failure_is_logged(monkeypatch, caplog):
    def _raise(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(tasks.EmailMultiAlternatives, "send", _raise)
    caplog.set_level("ERROR", logger="notifications.tasks")

    sent = tasks.send_moderation_email("fail@example.com", "post_approved", payload())

    assert sent is False
    log = NotificationLog.objects.get()
    assert log.status == NotificationLog.Status.FAILED
    assert log.error == "boom"
    assert any("email send failed" in record.getMessage() for record in caplog.records)


def test_missing_recipient_logged_as_failure():
    assert tasks.send_moderation_email("", "post_approved", payload()) is False

    log = NotificationLog.objects.get()
    assert log.status == NotificationLog.Status.FAILED
    assert log.error == "missing recipient email"
    assert mail.outbox == []


def test_dispatcher_queues_email_task(monkeypatch):
    queued = []
    monkeypatch.setattr(tasks.send_moderation_email, "delay", lambda *args: queued.append(args))

    assert NotificationDispatcher().notify("a@example.com", "post_rejected", payload()) is True
    assert queued == [("a@example.com", "post_rejected", payload())]


def test_dispatcher_refuses_unknown_template(monkeypatch, caplog):
    queued = []
    monkeypatch.setattr(tasks.send_moderation_email, "delay", lambda *args: queued.append(args))
    caplog.set_level("WARNING", logger="notifications.dispatcher")

    assert NotificationDispatcher().notify("a@example.com", "listing_featured", payload()) is False
    assert queued == []
    assert any("unknown template kind" in record.getMessage() for record in caplog.records)


def test_dispatcher_swallows_broker_errors(monkeypatch, caplog):
    def _broken(*args):
        raise ConnectionError("broker unavailable")

    monkeypatch.setattr(tasks.send_moderation_email, "delay", _broken)
    caplog.set_level("INFO", logger="notifications.dispatcher")

    assert NotificationDispatcher().notify("a@example.com", "post_approved", payload()) is False
    assert any("could not queue" in record.getMessage() for record in caplog.records)


def test_dispatcher_end_to_end_with_eager_celery():
    NotificationDispatcher().notify("eager@example.com", "post_approved", payload())

    assert len(mail.outbox) == 1
    assert NotificationLog.objects.filter(status=NotificationLog.Status.SENT).count() == 1
