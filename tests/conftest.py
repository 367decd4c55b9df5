"""Pytest configuration and fixtures for the user admin tests.

Provides an isolated SQLite profile store per test, an in-memory stand-in
for the Supabase Auth API, settings, and API Gateway event factories.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any, Optional
from uuid import uuid4

import pytest

# Add backend source to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / 'backend' / 'src'))

from app.exceptions import IdentityProviderError  # noqa: E402

SERVICE_KEY = 'service-role-key'
ANON_KEY = 'anon-key'


# --- Database Fixtures ---


@pytest.fixture
def test_engine():
    """Create a fresh in-memory profile store for one test.

    SQLite needs explicit BEGIN handling for SAVEPOINT support, which the
    profile reconciliation relies on.
    """
    from sqlalchemy import create_engine, event

    from app.db.base import Base

    engine = create_engine(
        os.getenv('TEST_DATABASE_URL', 'sqlite:///:memory:'),
        echo=os.getenv('TEST_SQL_ECHO', '').lower() == 'true',
    )

    if engine.dialect.name == 'sqlite':

        @event.listens_for(engine, 'connect')
        def _disable_pysqlite_begin(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, 'begin')
        def _emit_begin(conn):
            conn.exec_driver_sql('BEGIN')

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory bound to the test engine."""
    from app.db.engine import get_session_factory

    return get_session_factory(test_engine)


def add_profile(
    session_factory,
    role: str = 'admin',
    active: bool = True,
    profile_id: Optional[str] = None,
    email: Optional[str] = None,
) -> str:
    """Insert a profile row and return its id."""
    from app.db.models import Profile

    profile_id = profile_id or str(uuid4())
    with session_factory() as session:
        session.add(
            Profile(
                id=profile_id,
                email=email or f'{role}-{profile_id[:8]}@example.com',
                full_name=f'{role.title()} User',
                role=role,
                active=active,
            )
        )
        session.commit()
    return profile_id


def get_profile(session_factory, profile_id: str):
    from app.db.models import Profile

    with session_factory() as session:
        return session.get(Profile, profile_id)


def count_profiles(session_factory) -> int:
    from sqlalchemy import func, select

    from app.db.models import Profile

    with session_factory() as session:
        return session.scalar(select(func.count()).select_from(Profile))


# --- Identity Provider Fixtures ---


class FakeIdentityProvider:
    """In-memory stand-in for the Supabase Auth admin API."""

    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.tokens: dict[str, str] = {}
        self.accepted_keys: set[str] = {SERVICE_KEY, ANON_KEY}
        self.calls: list[tuple[str, ...]] = []
        self.on_invite = None

    def add_user(self, user_id: str, email: str = 'caller@example.com') -> str:
        """Register a user and return a bearer token for it."""
        self.users[user_id] = {'id': user_id, 'email': email}
        token = f'token-{user_id}'
        self.tokens[token] = user_id
        return token

    def get_user(self, api_key: str, authorization: str) -> dict[str, Any]:
        self.calls.append(('get_user', api_key, authorization))
        if api_key not in self.accepted_keys:
            raise IdentityProviderError('Invalid API key', provider_status=401)
        token = authorization.split(' ', 1)[-1].strip()
        user_id = self.tokens.get(token)
        if user_id is None or user_id not in self.users:
            raise IdentityProviderError('invalid JWT', provider_status=401)
        return dict(self.users[user_id])

    def invite_user_by_email(self, email, data, redirect_to=None) -> dict[str, Any]:
        self.calls.append(('invite', email, redirect_to))
        if any(user['email'] == email for user in self.users.values()):
            raise IdentityProviderError(
                'A user with this email address has already been registered',
                provider_status=422,
            )
        user_id = str(uuid4())
        self.users[user_id] = {'id': user_id, 'email': email, 'user_metadata': dict(data)}
        if self.on_invite:
            self.on_invite(user_id, email, data)
        return dict(self.users[user_id])

    def delete_user(self, user_id: str) -> None:
        self.calls.append(('delete', user_id))
        if user_id not in self.users:
            raise IdentityProviderError('User not found', provider_status=404)
        del self.users[user_id]


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider()


# --- Settings and Handler Fixtures ---


@pytest.fixture
def settings():
    from app.config import UserAdminSettings

    return UserAdminSettings(
        base_url='https://project.supabase.co',
        service_credential=SERVICE_KEY,
        public_credential=ANON_KEY,
        redirect_url='https://app.example.com/welcome/',
        allowed_origins=('https://app.example.com', 'http://localhost:5173'),
        version='user-admin-test',
    )


@pytest.fixture
def make_handler(settings, identity, session_factory):
    """Build an AccessControlledUserOp for an entry point."""
    from app.api.user_admin import USER_ADMIN, AccessControlledUserOp

    def _make(entry_point=USER_ADMIN, **overrides):
        return AccessControlledUserOp(
            overrides.get('settings', settings),
            entry_point,
            identity=identity,
            session_factory=session_factory,
        )

    return _make


@pytest.fixture
def caller_factory(identity, session_factory):
    """Create a verified caller with a profile; returns (user_id, token)."""

    def _make(role: str = 'admin', active: bool = True, with_profile: bool = True):
        user_id = str(uuid4())
        token = identity.add_user(user_id, email=f'{role}-{user_id[:8]}@example.com')
        if with_profile:
            add_profile(session_factory, role=role, active=active, profile_id=user_id)
        return user_id, token

    return _make


# --- API Event Fixtures ---


def make_event(
    method: str = 'POST',
    body: Any = None,
    token: Optional[str] = None,
    headers: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    """Build an API Gateway proxy event."""
    event_headers = {'Content-Type': 'application/json'}
    if token is not None:
        event_headers['Authorization'] = f'Bearer {token}'
    event_headers.update(headers or {})
    if body is not None and not isinstance(body, str):
        body = json.dumps(body)
    return {
        'httpMethod': method,
        'path': '/functions/v1/user-admin',
        'headers': event_headers,
        'requestContext': {'requestId': str(uuid4())},
        'body': body,
        'isBase64Encoded': False,
    }


def response_body(response: dict[str, Any]) -> Any:
    return json.loads(response['body']) if response['body'] else None
