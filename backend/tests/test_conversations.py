from datetime import datetime
from uuid import UUID

import pytest
from sqlmodel import select

from app.core.exceptions import InvalidInput
from app.models import Conversation, ConversationType, Ticket
from app.services.conversations import ConversationService
from conftest import auth


def test_owner_message_creates_global_conversation_once(client, session, ticket, user):
    for content in ("Hello?", "Anyone there?"):
        response = client.post(f"/api/tickets/{ticket['id']}/messages", json={"content": content}, headers=auth(user))
        assert response.status_code == 201
        assert response.json()["success"] is True

    conversations = session.exec(select(Conversation)).all()
    assert len(conversations) == 1
    assert conversations[0].type == ConversationType.GLOBAL


def test_message_content_is_trimmed_and_required(client, ticket, user):
    response = client.post(f"/api/tickets/{ticket['id']}/messages", json={"content": "   "}, headers=auth(user))
    assert response.status_code == 400

    response = client.post(f"/api/tickets/{ticket['id']}/messages", json={"content": "  hi  "}, headers=auth(user))
    assert response.json()["message"]["content"] == "hi"


def test_stranger_cannot_post(client, ticket, other_user):
    response = client.post(f"/api/tickets/{ticket['id']}/messages", json={"content": "hi"}, headers=auth(other_user))
    assert response.status_code == 403


def test_agent_reply_notifies_owner(client, ticket, user, agent, transport):
    transport.sent.clear()
    response = client.post(f"/api/tickets/{ticket['id']}/reply", json={"content": "On my way"}, headers=auth(agent))
    assert response.status_code == 201
    assert [m["to"] for m in transport.sent] == [user.email]
    assert "On my way" in transport.sent[0]["html"]


def test_owner_cannot_use_agent_endpoints(client, ticket, user):
    for path in ("reply", "notes"):
        response = client.post(f"/api/tickets/{ticket['id']}/{path}", json={"content": "x"}, headers=auth(user))
        assert response.status_code == 403


def test_user_message_notifies_assignee(client, ticket, user, agent, transport):
    client.put(f"/api/tickets/{ticket['id']}/assign", json={"agent_id": agent.id}, headers=auth(agent))
    transport.sent.clear()

    client.post(f"/api/tickets/{ticket['id']}/messages", json={"content": "Any news?"}, headers=auth(user))
    assert [m["to"] for m in transport.sent] == [agent.email]


def test_unassigned_user_message_sends_nothing(client, ticket, user, transport):
    transport.sent.clear()
    client.post(f"/api/tickets/{ticket['id']}/messages", json={"content": "Any news?"}, headers=auth(user))
    assert transport.sent == []


def test_internal_notes_are_hidden_from_owner(client, ticket, user, agent):
    client.post(f"/api/tickets/{ticket['id']}/messages", json={"content": "Help"}, headers=auth(user))
    client.post(f"/api/tickets/{ticket['id']}/reply", json={"content": "Looking"}, headers=auth(agent))
    client.post(f"/api/tickets/{ticket['id']}/notes", json={"content": "Toner is empty"}, headers=auth(agent))

    owner_view = client.get(f"/api/tickets/{ticket['id']}/conversation", headers=auth(user)).json()["conversation"]
    assert [m["content"] for m in owner_view["global"]["messages"]] == ["Help", "Looking"]
    assert owner_view["agent_notes"] is None

    agent_view = client.get(f"/api/tickets/{ticket['id']}/conversation", headers=auth(agent)).json()["conversation"]
    assert [m["content"] for m in agent_view["agent_notes"]["messages"]] == ["Toner is empty"]
    assert agent_view["global"]["messages"][1]["author"]["id"] == agent.id


def test_empty_conversation(client, ticket, user):
    response = client.get(f"/api/tickets/{ticket['id']}/conversation", headers=auth(user))
    assert response.status_code == 200
    assert response.json()["conversation"] == {"global": None, "agent_notes": None}


def test_listing_messages_requires_participation(client, session, ticket, user, other_user, agent):
    client.post(f"/api/tickets/{ticket['id']}/messages", json={"content": "Help"}, headers=auth(user))
    client.post(f"/api/tickets/{ticket['id']}/notes", json={"content": "secret"}, headers=auth(agent))
    by_type = {c.type: c.id for c in session.exec(select(Conversation)).all()}
    global_id = by_type[ConversationType.GLOBAL]
    notes_id = by_type[ConversationType.AGENT_ONLY]

    owner = client.get(f"/api/conversations/{global_id}/messages", headers=auth(user))
    assert owner.status_code == 200
    assert [m["content"] for m in owner.json()["messages"]] == ["Help"]

    assert client.get(f"/api/conversations/{notes_id}/messages", headers=auth(user)).status_code == 403
    assert client.get(f"/api/conversations/{global_id}/messages", headers=auth(other_user)).status_code == 403
    assert client.get(f"/api/conversations/{notes_id}/messages", headers=auth(agent)).status_code == 200


def test_listing_unknown_conversation(client, user):
    response = client.get("/api/conversations/00000000-0000-0000-0000-000000000000/messages", headers=auth(user))
    assert response.status_code == 404


def test_delete_message_author_or_admin(client, ticket, user, agent, admin):
    first = client.post(f"/api/tickets/{ticket['id']}/messages", json={"content": "one"}, headers=auth(user)).json()["message"]
    second = client.post(f"/api/tickets/{ticket['id']}/messages", json={"content": "two"}, headers=auth(user)).json()["message"]

    assert client.delete(f"/api/messages/{first['id']}", headers=auth(agent)).status_code == 403
    assert client.delete(f"/api/messages/{first['id']}", headers=auth(user)).status_code == 200
    assert client.delete(f"/api/messages/{second['id']}", headers=auth(admin)).status_code == 200
    assert client.delete(f"/api/messages/{second['id']}", headers=auth(admin)).status_code == 404


def test_get_or_create_is_idempotent(session, ticket):
    service = ConversationService(session)
    ticket_id = UUID(ticket["id"])
    first = service.get_or_create(ticket_id, ConversationType.AGENT_ONLY)
    second = service.get_or_create(ticket_id, ConversationType.AGENT_ONLY)
    assert first.id == second.id


def test_get_or_create_rejects_unknown_type(session, ticket):
    with pytest.raises(InvalidInput):
        ConversationService(session).get_or_create(UUID(ticket["id"]), 3)


def test_service_notifies_with_new_message_template(session, ticket, user, agent, notifier):
    stored = session.get(Ticket, UUID(ticket["id"]))
    service = ConversationService(session, notifier)
    service.agent_reply_to_user(agent, stored, "Fixed the toner")

    to, template, data = notifier.calls[-1]
    assert (to, template) == (user.email, "new_message")
    assert data["sender"] == agent.name
    assert data["content"] == "Fixed the toner"


def test_messages_sharing_a_timestamp_keep_posting_order(session, ticket, user, agent):
    service = ConversationService(session)
    conversation = service.get_or_create(UUID(ticket["id"]), ConversationType.GLOBAL)
    posted = [
        service.send_message(conversation.id, author.id, content)
        for author, content in ((agent, "first"), (user, "second"), (agent, "third"))
    ]
    assert [m.seq for m in posted] == [1, 2, 3]

    same_instant = datetime(2024, 1, 1, 12, 0, 0)
    for message in posted:
        message.sent_at = same_instant
        session.add(message)
    session.commit()

    assert [m.content for m in service.get_messages(conversation.id)] == ["first", "second", "third"]
