"""Tests for user admin request schemas."""

from __future__ import annotations

import pytest

from app.api.schemas import OpOutcome, OpResult, UserOpAction, UserOpRequest
from app.exceptions import ValidationError


class TestRequireFields:
    @pytest.mark.parametrize('action', [UserOpAction.INVITE, UserOpAction.RESEND])
    @pytest.mark.parametrize(
        'fields',
        [
            {'email': 'a@b.com', 'role': 'staff'},
            {'full_name': 'A B', 'role': 'staff'},
            {'email': 'a@b.com', 'full_name': '   ', 'role': 'staff'},
            {'email': 'a@b.com', 'full_name': 'A B', 'role': ''},
        ],
    )
    def test_invite_needs_all_fields(self, action, fields) -> None:
        with pytest.raises(ValidationError) as exc_info:
            UserOpRequest(action=action, **fields).require_fields()
        assert exc_info.value.message == 'email, full_name and role are all required'

    @pytest.mark.parametrize('role', ['owner', 'Admin', ' staff'])
    def test_role_matched_exactly(self, role) -> None:
        request = UserOpRequest(
            action=UserOpAction.INVITE, email='a@b.com', full_name='A B', role=role
        )
        with pytest.raises(ValidationError) as exc_info:
            request.require_fields()
        assert exc_info.value.message == 'role must be one of: staff, manager, admin'
        assert exc_info.value.field == 'role'

    def test_delete_needs_user_id(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            UserOpRequest(action=UserOpAction.DELETE_USER, user_id=' ').require_fields()
        assert exc_info.value.message == 'user_id is required'

    def test_complete_requests_pass(self) -> None:
        UserOpRequest(
            action=UserOpAction.INVITE, email=' a@b.com ', full_name='A B', role='manager'
        ).require_fields()
        UserOpRequest(action=UserOpAction.DELETE_USER, user_id='u1').require_fields()


def test_result_bodies() -> None:
    assert OpResult(outcome=OpOutcome.INVITED, user_id='u1').to_response() == {
        'success': True,
        'user_id': 'u1',
    }
    assert OpResult(outcome=OpOutcome.DELETED).to_response() == {'success': True}
