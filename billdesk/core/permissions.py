# billdesk/core/permissions.py

from enum import Enum


class Role(str, Enum):
    ADMIN = "ADMIN"
    ACCOUNTS = "ACCOUNTS"
    DESIGN = "DESIGN"
    SALES = "SALES"
    OPERATIONS = "OPERATIONS"


class Permissions(str, Enum):

    # =========================
    # CLIENT MANAGEMENT
    # =========================
    CREATE_CLIENT = "client:create"
    READ_CLIENT = "client:read"

    # =========================
    # INVOICES
    # =========================
    GENERATE_INVOICE = "invoice:generate"
    READ_INVOICE = "invoice:read"
    UPDATE_INVOICE_STATUS = "invoice:update_status"
    READ_INVOICE_DOCUMENT = "invoice:document_read"


BILLING_ROLES = frozenset({Role.ADMIN, Role.ACCOUNTS})

# Flat policy, no role inherits from another.
ROLE_POLICY: dict[Permissions, frozenset[Role]] = {
    Permissions.CREATE_CLIENT: frozenset({Role.ADMIN}),
    Permissions.READ_CLIENT: frozenset({Role.ADMIN, Role.ACCOUNTS, Role.SALES}),
    Permissions.GENERATE_INVOICE: BILLING_ROLES,
    Permissions.READ_INVOICE: BILLING_ROLES,
    Permissions.UPDATE_INVOICE_STATUS: BILLING_ROLES,
    Permissions.READ_INVOICE_DOCUMENT: BILLING_ROLES,
}


def roles_for(permission: Permissions) -> frozenset[Role]:
    return ROLE_POLICY.get(permission, frozenset())
