import uuid

import pytest

from budget_app.core.permissions import (
    can_create_transaction,
    can_delete_budget,
    can_delete_transaction,
    can_edit_categories,
    can_edit_plans,
    can_edit_transaction,
    can_manage_users,
    can_update_budget,
    has_role_at_least,
)
from budget_app.models.enums import Role


ME = uuid.uuid4()
SOMEONE_ELSE = uuid.uuid4()


@pytest.mark.parametrize(
    "role,required,expected",
    [
        (Role.OWNER, Role.ADMIN, True),
        (Role.ADMIN, Role.ADMIN, True),
        (Role.VISITOR, Role.ADMIN, False),
        (Role.ADMIN, Role.OWNER, False),
        (Role.VISITOR, Role.VISITOR, True),
    ],
)
def test_role_hierarchy(role, required, expected):
    assert has_role_at_least(role, required) is expected


def test_owner_edits_any_transaction():
    assert can_edit_transaction(Role.OWNER, SOMEONE_ELSE, ME)
    assert can_delete_transaction(Role.OWNER, SOMEONE_ELSE, ME)


def test_admin_edits_only_own_transactions():
    assert can_edit_transaction(Role.ADMIN, ME, ME)
    assert not can_edit_transaction(Role.ADMIN, SOMEONE_ELSE, ME)
    assert not can_delete_transaction(Role.ADMIN, SOMEONE_ELSE, ME)


def test_visitor_cannot_touch_transactions():
    assert not can_create_transaction(Role.VISITOR)
    assert not can_edit_transaction(Role.VISITOR, ME, ME)
    assert not can_delete_transaction(Role.VISITOR, ME, ME)


@pytest.mark.parametrize(
    "role,plans,categories,users,budget",
    [
        (Role.OWNER, True, True, True, True),
        (Role.ADMIN, True, True, False, False),
        (Role.VISITOR, False, False, False, False),
    ],
)
def test_permission_matrix(role, plans, categories, users, budget):
    assert can_edit_plans(role) is plans
    assert can_edit_categories(role) is categories
    assert can_manage_users(role) is users
    assert can_update_budget(role) is budget
    assert can_delete_budget(role) is budget
