"""
Cat Registry API — Authorization Gate Tests
============================================

What:  The ALLOW/DENY table for every operation and caller kind.
How:   Pure function tests; no database.
"""

import uuid

import pytest

from catapi.authorization import (
    OPERATION_SCOPES,
    CallerIdentity,
    Decision,
    Operation,
    Scope,
    authorize,
    can_act,
)
from catapi.exceptions import AuthorizationError


USER = CallerIdentity(id=uuid.uuid4(), user_name="alice", email="alice@example.com")
OTHER = CallerIdentity(id=uuid.uuid4(), user_name="bob", email="bob@example.com")
ADMIN = CallerIdentity(id=uuid.uuid4(), user_name="root", email="admin@example.com", role="admin")


class TestScopeTable:

    def test_every_operation_has_a_scope(self):
        assert set(OPERATION_SCOPES) == set(Operation)

    @pytest.mark.parametrize("operation", [
        Operation.CAT_LIST,
        Operation.CAT_GET,
        Operation.CAT_LIST_IN_BOX,
        Operation.USER_LIST,
        Operation.USER_GET,
        Operation.USER_REGISTER,
    ])
    def test_public_operations_allow_anonymous(self, operation):
        assert OPERATION_SCOPES[operation] is Scope.PUBLIC
        assert can_act(None, operation) is Decision.ALLOW


class TestCanAct:

    @pytest.mark.parametrize("operation", [
        Operation.CAT_LIST_OWN,
        Operation.CAT_CREATE,
        Operation.CAT_UPDATE_OWN,
        Operation.CAT_DELETE_OWN,
        Operation.USER_UPDATE_SELF,
        Operation.USER_DELETE_SELF,
        Operation.USER_CHECK_TOKEN,
    ])
    def test_authenticated_operations_need_a_caller(self, operation):
        assert can_act(None, operation) is Decision.DENY
        assert can_act(USER, operation) is Decision.ALLOW

    @pytest.mark.parametrize("operation", [Operation.CAT_UPDATE_ANY, Operation.CAT_DELETE_ANY])
    def test_admin_operations(self, operation):
        assert can_act(None, operation) is Decision.DENY
        assert can_act(USER, operation) is Decision.DENY
        assert can_act(ADMIN, operation) is Decision.ALLOW

    def test_admin_operation_denied_to_user_even_as_owner(self):
        decision = can_act(USER, Operation.CAT_UPDATE_ANY, resource_owner=USER.id)
        assert decision is Decision.DENY

    def test_owner_scope_with_known_owner(self):
        assert can_act(USER, Operation.CAT_UPDATE_OWN, resource_owner=USER.id) is Decision.ALLOW
        assert can_act(OTHER, Operation.CAT_UPDATE_OWN, resource_owner=USER.id) is Decision.DENY

    def test_owner_scope_without_known_owner_only_needs_a_caller(self):
        assert can_act(OTHER, Operation.CAT_DELETE_OWN) is Decision.ALLOW

    def test_admin_is_not_an_owner_override(self):
        # Owner-scoped operations compare ids; the admin variants exist for that
        decision = can_act(ADMIN, Operation.CAT_DELETE_OWN, resource_owner=USER.id)
        assert decision is Decision.DENY


class TestAuthorize:

    def test_returns_caller_on_allow(self):
        assert authorize(USER, Operation.CAT_CREATE) is USER

    def test_public_operation_returns_none_caller(self):
        assert authorize(None, Operation.CAT_LIST) is None

    def test_no_user(self):
        with pytest.raises(AuthorizationError, match="No user") as exc_info:
            authorize(None, Operation.CAT_CREATE)
        assert exc_info.value.status_code == 400

    def test_not_admin(self):
        with pytest.raises(AuthorizationError, match="Not admin"):
            authorize(USER, Operation.CAT_DELETE_ANY)

    def test_no_user_takes_precedence_over_not_admin(self):
        with pytest.raises(AuthorizationError, match="No user"):
            authorize(None, Operation.CAT_DELETE_ANY)

    def test_not_owner(self):
        with pytest.raises(AuthorizationError, match="Not owner"):
            authorize(OTHER, Operation.USER_UPDATE_SELF, resource_owner=USER.id)

    def test_caller_identity_is_admin(self):
        assert ADMIN.is_admin
        assert not USER.is_admin
