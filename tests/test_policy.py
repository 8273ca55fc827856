from inventory_api.core.errors import Forbidden, Unauthorized
from inventory_api.core.policy import DenyReason, authorize, can_assign_role
from inventory_api.models.user import Role


def test_missing_caller_is_unauthenticated():
    decision = authorize(None, None, target_identity="a")

    assert not decision.allowed
    assert decision.reason is DenyReason.UNAUTHENTICATED
    assert isinstance(decision.to_error(), Unauthorized)


def test_admin_may_act_on_any_target():
    assert authorize(Role.ADMIN, "admin-id", target_identity="someone-else").allowed
    assert authorize(Role.ADMIN, "admin-id", required_role=Role.ADMIN).allowed


def test_user_may_act_on_self():
    assert authorize(Role.USER, "a", target_identity="a").allowed


def test_user_may_not_act_on_others():
    decision = authorize(Role.USER, "a", target_identity="b")

    assert not decision.allowed
    assert decision.reason is DenyReason.FORBIDDEN
    assert isinstance(decision.to_error(), Forbidden)


def test_user_lacking_required_role():
    decision = authorize(Role.USER, "a", required_role=Role.ADMIN)

    assert decision.reason is DenyReason.FORBIDDEN
    assert decision.to_error().status_code == 403


def test_any_authenticated_caller_without_target():
    assert authorize(Role.USER, "a").allowed


def test_only_admins_assign_roles():
    assert can_assign_role(Role.ADMIN)
    assert not can_assign_role(Role.USER)
    assert not can_assign_role(None)
