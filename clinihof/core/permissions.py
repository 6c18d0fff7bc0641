"""
Role-based access policy.

One static table drives both API enforcement (``clinihof.api.deps``) and the
menu the UI renders (``GET /permissions/me``). Adding a resource means adding
it to ``PERMISSIONS`` and, when some role only reads it, to the write rules
below.
"""

from typing import Dict, FrozenSet, List, Optional

from clinihof.db.models.user import UserRole

MASTER = UserRole.MASTER
ADMIN = UserRole.ADMIN
MANAGER = UserRole.MANAGER
USER = UserRole.USER
RECEPTIONIST = UserRole.RECEPTIONIST

# resource -> roles allowed to read it
PERMISSIONS: Dict[str, FrozenSet[UserRole]] = {
    "dashboard": frozenset({MASTER, ADMIN, MANAGER}),
    "agenda": frozenset({MASTER, ADMIN, MANAGER, RECEPTIONIST, USER}),
    "patients": frozenset({MASTER, ADMIN, MANAGER, RECEPTIONIST}),
    "sales": frozenset({MASTER, ADMIN, MANAGER}),
    "quotes": frozenset({MASTER, ADMIN, MANAGER, RECEPTIONIST}),
    "procedures": frozenset({MASTER, ADMIN, MANAGER, RECEPTIONIST}),
    "supplies": frozenset({MASTER, ADMIN, MANAGER, RECEPTIONIST}),
    "packages": frozenset({MASTER, ADMIN, MANAGER, RECEPTIONIST}),
    "collaborators": frozenset({MASTER, ADMIN, MANAGER}),
    "costs": frozenset({MASTER, ADMIN, MANAGER}),
    "commissions": frozenset({MASTER, ADMIN}),
    "cashflow": frozenset({MASTER, ADMIN}),
    "team": frozenset({MASTER, ADMIN, MANAGER}),
    "settings": frozenset({MASTER, ADMIN}),
}

# Roles that may only write the listed resources
WRITE_ALLOWLIST: Dict[UserRole, FrozenSet[str]] = {
    USER: frozenset({"agenda"}),
}

# Roles that read but never write the listed resources
WRITE_DENYLIST: Dict[UserRole, FrozenSet[str]] = {
    RECEPTIONIST: frozenset({"patients", "procedures", "quotes", "supplies", "packages"}),
    MANAGER: frozenset({"commissions", "cashflow", "settings"}),
}

MENU_ITEMS = [
    {"key": "dashboard", "name": "Dashboard", "href": "/admin"},
    {"key": "agenda", "name": "Agenda", "href": "/appointments"},
    {"key": "patients", "name": "Pacientes", "href": "/patients"},
    {"key": "sales", "name": "Vendas", "href": "/sales"},
    {"key": "quotes", "name": "Orçamentos", "href": "/quotes"},
    {"key": "procedures", "name": "Procedimentos", "href": "/procedures"},
    {"key": "supplies", "name": "Insumos", "href": "/supplies"},
    {"key": "packages", "name": "Pacotes", "href": "/packages"},
    {"key": "collaborators", "name": "Colaboradores", "href": "/collaborators"},
    {"key": "costs", "name": "Custos", "href": "/costs"},
    {"key": "commissions", "name": "Comissões", "href": "/comissoes"},
    {"key": "cashflow", "name": "Fluxo de Caixa", "href": "/cashflow"},
    {"key": "team", "name": "Equipe", "href": "/team"},
    {"key": "settings", "name": "Configurações", "href": "/configuracoes"},
]


def _as_role(role) -> Optional[UserRole]:
    if role is None:
        return None
    try:
        return UserRole(role)
    except ValueError:
        return None


def can_access(role, resource: str) -> bool:
    role = _as_role(role)
    if role is None or not resource:
        return False
    return role in PERMISSIONS.get(resource, frozenset())


def can_write(role, resource: str) -> bool:
    if not can_access(role, resource):
        return False
    role = _as_role(role)
    if role in WRITE_ALLOWLIST:
        return resource in WRITE_ALLOWLIST[role]
    return resource not in WRITE_DENYLIST.get(role, frozenset())


def can_manage_team(role, target_role=None) -> bool:
    """Whether ``role`` may invite, edit or remove a member holding ``target_role``."""
    if not can_access(role, "team"):
        return False
    role = _as_role(role)
    target = _as_role(target_role)

    if role == MASTER:
        return True
    if role == ADMIN:
        return target != MASTER
    if role == MANAGER:
        return target in (USER, RECEPTIONIST)
    return False


def readable_resources(role) -> List[str]:
    return [resource for resource in PERMISSIONS if can_access(role, resource)]


def writable_resources(role) -> List[str]:
    return [resource for resource in PERMISSIONS if can_write(role, resource)]


def visible_menu_items(role) -> List[dict]:
    return [dict(item) for item in MENU_ITEMS if can_access(role, item["key"])]
