import uuid

from ..models.enums import Role


ROLE_HIERARCHY = {
    Role.OWNER: 3,
    Role.ADMIN: 2,
    Role.VISITOR: 1,
}


def has_role_at_least(role: Role, required: Role) -> bool:
    return ROLE_HIERARCHY[role] >= ROLE_HIERARCHY[required]


def can_create_transaction(role: Role) -> bool:
    return role in (Role.OWNER, Role.ADMIN)


def can_edit_transaction(role: Role, transaction_user_id: uuid.UUID, current_user_id: uuid.UUID) -> bool:
    """Owners edit anything; admins only what they recorded themselves."""
    if role == Role.OWNER:
        return True
    if role == Role.ADMIN and transaction_user_id == current_user_id:
        return True
    return False


def can_delete_transaction(role: Role, transaction_user_id: uuid.UUID, current_user_id: uuid.UUID) -> bool:
    return can_edit_transaction(role, transaction_user_id, current_user_id)


def can_edit_plans(role: Role) -> bool:
    return role in (Role.OWNER, Role.ADMIN)


def can_edit_categories(role: Role) -> bool:
    return role in (Role.OWNER, Role.ADMIN)


def can_manage_users(role: Role) -> bool:
    return role == Role.OWNER


def can_update_budget(role: Role) -> bool:
    return role == Role.OWNER


def can_delete_budget(role: Role) -> bool:
    return role == Role.OWNER
