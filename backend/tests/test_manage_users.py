import importlib.util
from pathlib import Path

import pytest

from app.models import UserRole

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "manage_users.py"


@pytest.fixture
def manage_users():
    spec = importlib.util.spec_from_file_location("manage_users", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_set_role_by_email(manage_users, session, user):
    updated = manage_users.set_role(session, " UMA@example.com ", UserRole.ADMIN)
    assert updated.id == user.id
    assert updated.role_id == UserRole.ADMIN


def test_set_role_unknown_email(manage_users, session):
    with pytest.raises(LookupError):
        manage_users.set_role(session, "ghost@example.com", UserRole.AGENT)


def test_set_role_rejects_unknown_role(manage_users, session, user):
    with pytest.raises(ValueError):
        manage_users.set_role(session, user.email, 7)


def test_list_users_prints_accounts(manage_users, session, user, agent, capsys):
    listed = manage_users.list_users(session)
    assert {u.id for u in listed} == {user.id, agent.id}
    assert "alice@example.com" in capsys.readouterr().out
