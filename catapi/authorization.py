"""
Cat Registry API — Authorization Gate
======================================

What:  Pure ALLOW / DENY decisions for every (caller, operation) pair.
Why:   One table of rules instead of role checks sprinkled through handlers.
How:   Each Operation maps to a Scope; `can_act` evaluates the scope rules in a
       fixed precedence and `authorize` turns a DENY into AuthorizationError.
Who:   Called by every resource handler in catapi.services before any store call.

Rule precedence:
    1. PUBLIC operations are always allowed.
    2. Any other scope needs a caller             → DENY "No user"
    3. ADMIN scope needs caller.role == 'admin'   → DENY "Not admin"
    4. OWNER scope needs caller.id == owner, when the owner is known up front
                                                  → DENY "Not owner"

Owner-scoped handlers usually do NOT know the owner up front. They fold the
ownership constraint into the store filter ({"id": cat_id, "owner_id": caller.id})
so that "someone else's cat" and "no such cat" produce the same NOT_FOUND. That
collapse is deliberate: the gate only guarantees a caller exists, and the filter
does the rest.
"""

import enum
import uuid
from dataclasses import dataclass
from typing import Dict, Optional

from catapi.exceptions import AuthorizationError


class Decision(str, enum.Enum):
    ALLOW = "allow"
    DENY = "deny"


class Scope(str, enum.Enum):
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    OWNER = "owner"
    ADMIN = "admin"


class Operation(str, enum.Enum):
    CAT_LIST = "cat:list"
    CAT_GET = "cat:get"
    CAT_LIST_IN_BOX = "cat:list_in_box"
    CAT_LIST_OWN = "cat:list_own"
    CAT_CREATE = "cat:create"
    CAT_UPDATE_OWN = "cat:update_own"
    CAT_DELETE_OWN = "cat:delete_own"
    CAT_UPDATE_ANY = "cat:update_any"
    CAT_DELETE_ANY = "cat:delete_any"
    USER_LIST = "user:list"
    USER_GET = "user:get"
    USER_REGISTER = "user:register"
    USER_UPDATE_SELF = "user:update_self"
    USER_DELETE_SELF = "user:delete_self"
    USER_CHECK_TOKEN = "user:check_token"


OPERATION_SCOPES: Dict[Operation, Scope] = {
    Operation.CAT_LIST: Scope.PUBLIC,
    Operation.CAT_GET: Scope.PUBLIC,
    Operation.CAT_LIST_IN_BOX: Scope.PUBLIC,
    Operation.CAT_LIST_OWN: Scope.AUTHENTICATED,
    Operation.CAT_CREATE: Scope.AUTHENTICATED,
    Operation.CAT_UPDATE_OWN: Scope.OWNER,
    Operation.CAT_DELETE_OWN: Scope.OWNER,
    Operation.CAT_UPDATE_ANY: Scope.ADMIN,
    Operation.CAT_DELETE_ANY: Scope.ADMIN,
    Operation.USER_LIST: Scope.PUBLIC,
    Operation.USER_GET: Scope.PUBLIC,
    Operation.USER_REGISTER: Scope.PUBLIC,
    Operation.USER_UPDATE_SELF: Scope.OWNER,
    Operation.USER_DELETE_SELF: Scope.OWNER,
    Operation.USER_CHECK_TOKEN: Scope.AUTHENTICATED,
}


@dataclass(frozen=True)
class CallerIdentity:
    """
    The authenticated principal of one request.

    Built once per request from the bearer token and passed explicitly to
    every handler; handlers never read identity from the request body.
    """
    id: uuid.UUID
    user_name: str
    email: str
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def can_act(
    caller: Optional[CallerIdentity],
    operation: Operation,
    resource_owner: Optional[uuid.UUID] = None,
) -> Decision:
    """
    Decide whether `caller` may perform `operation`.

    Args:
        caller:          The request's identity, or None when unauthenticated.
        operation:       The operation being attempted.
        resource_owner:  Owner id of the target (the user's own id for
                         self-scoped user operations) when already known.

    Returns:
        Decision.ALLOW or Decision.DENY. Never raises, never performs I/O.
    """
    return _evaluate(caller, operation, resource_owner)[0]


def authorize(
    caller: Optional[CallerIdentity],
    operation: Operation,
    resource_owner: Optional[uuid.UUID] = None,
) -> Optional[CallerIdentity]:
    """
    Enforce `can_act`; return the caller on ALLOW.

    Raises:
        AuthorizationError (400) with "No user", "Not admin" or "Not owner".
    """
    decision, reason = _evaluate(caller, operation, resource_owner)
    if decision is Decision.DENY:
        raise AuthorizationError(
            message=reason,
            context={"operation": operation.value},
        )
    return caller


def _evaluate(caller, operation, resource_owner):
    scope = OPERATION_SCOPES[operation]

    if scope is Scope.PUBLIC:
        return Decision.ALLOW, ""

    if caller is None:
        return Decision.DENY, "No user"

    if scope is Scope.ADMIN and not caller.is_admin:
        return Decision.DENY, "Not admin"

    if scope is Scope.OWNER and resource_owner is not None and resource_owner != caller.id:
        return Decision.DENY, "Not owner"

    return Decision.ALLOW, ""
