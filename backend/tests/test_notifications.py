import httpx
import pytest
from pydantic import ValidationError

from app.core.config import Settings
from app.core.exceptions import DeliveryError
from app.models import Ticket, User
from app.services.email import LogTransport, ResendTransport, SendGridTransport, build_transport
from app.services.notifications import TEMPLATES, NotificationDispatcher, render_new_message
from conftest import FakeTransport


def test_every_template_renders():
    data = {
        "id": "t-1",
        "title": "Printer broken",
        "description": "jams",
        "priority": "High",
        "status": "Open",
        "old_status": "Assigned",
        "new_status": "Resolved",
        "sender": "Alice",
        "content": "done",
    }
    for name, render in TEMPLATES.items():
        subject, html = render(data)
        assert "Printer broken" in subject, name
        assert "Printer broken" in html, name


def test_templates_escape_values():
    _, html = render_new_message({"title": "x", "sender": "<b>Eve</b>", "content": "<script>alert(1)</script>"})
    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "&lt;b&gt;Eve&lt;/b&gt;" in html


def test_dispatcher_delivers_inline_without_scheduler():
    transport = FakeTransport()
    NotificationDispatcher(transport).send("a@example.com", "new_message", {"title": "t", "sender": "s", "content": "c"})
    assert [m["to"] for m in transport.sent] == ["a@example.com"]


def test_dispatcher_uses_scheduler():
    transport = FakeTransport()
    scheduled = []
    dispatcher = NotificationDispatcher(transport, schedule=lambda fn, *args: scheduled.append((fn, args)))

    dispatcher.send("a@example.com", "new_message", {"title": "t", "sender": "s", "content": "c"})
    assert transport.sent == []

    fn, args = scheduled[0]
    fn(*args)
    assert len(transport.sent) == 1


def test_dispatcher_swallows_delivery_errors(caplog):
    transport = FakeTransport()
    transport.fail = True
    NotificationDispatcher(transport).send("a@example.com", "new_message", {"title": "t", "sender": "s", "content": "c"})
    assert "failed" in caplog.text


def test_dispatcher_skips_missing_recipient():
    transport = FakeTransport()
    dispatcher = NotificationDispatcher(transport)
    dispatcher.new_message(User(id="u", name="No Mail", email="", role_id=1), _ticket(), _sender(), "hi")
    assert transport.sent == []


def _ticket():
    return Ticket(user_id="u", title="T", description="D", category_id=1, priority_id=1)


def _sender():
    return User(id="s", name="Sender", email="s@example.com", role_id=2)


def test_build_transport_selection():
    assert isinstance(build_transport(Settings(EMAIL_PROVIDER="log")), LogTransport)
    assert isinstance(build_transport(Settings(EMAIL_PROVIDER="SendGrid", EMAIL_API_KEY=None)), LogTransport)
    assert isinstance(build_transport(Settings(EMAIL_PROVIDER="sendgrid", EMAIL_API_KEY="k")), SendGridTransport)
    assert isinstance(build_transport(Settings(EMAIL_PROVIDER="resend", EMAIL_API_KEY="k")), ResendTransport)


def test_unknown_email_provider_fails_at_startup():
    with pytest.raises(ValidationError) as excinfo:
        Settings(EMAIL_PROVIDER="pigeon")
    assert "EMAIL_PROVIDER must be one of: log, sendgrid, resend" in str(excinfo.value)
    assert Settings(EMAIL_PROVIDER=" Resend ").EMAIL_PROVIDER == "resend"


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_sendgrid_transport_posts_payload():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(202)

    transport = SendGridTransport("key", "help@example.com", "Helpdesk", client=_client(handler))
    transport.deliver("u@example.com", "Subject", "<p>hi</p>")

    request = requests[0]
    assert str(request.url) == SendGridTransport.url
    assert request.headers["Authorization"] == "Bearer key"
    assert b'"u@example.com"' in request.content


def test_resend_transport_maps_errors_to_delivery_error():
    transport = ResendTransport(
        "key", "help@example.com", "Helpdesk", client=_client(lambda request: httpx.Response(500, text="down"))
    )
    with pytest.raises(DeliveryError):
        transport.deliver("u@example.com", "Subject", "<p>hi</p>")


def test_transport_network_failure_is_delivery_error():
    def handler(request):
        raise httpx.ConnectError("no route", request=request)

    transport = SendGridTransport("key", "help@example.com", "Helpdesk", client=_client(handler))
    with pytest.raises(DeliveryError):
        transport.deliver("u@example.com", "Subject", "<p>hi</p>")
