"""Portal error hierarchy, mapped to HTTP responses by the app."""

from __future__ import annotations


class PortalError(Exception):
    """Base exception carrying an HTTP status and a stable error code."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, *, status_code: int | None = None, error_code: str | None = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, object]:
        return {"message": self.message, "code": self.status_code, "error": self.error_code}


class CustomerNotFoundError(PortalError):
    status_code = 404
    error_code = "CUSTOMER_NOT_FOUND"

    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__("Customer not found")


NO_ROLES_MESSAGE = "User has no assigned roles. Please contact admin for role assignment."


class NoCompanyContactError(PortalError):
    """Raised when the customer is not a contact of any company."""

    status_code = 403
    error_code = "NO_COMPANY_CONTACT"

    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(NO_ROLES_MESSAGE)


class NoRolesAssignedError(PortalError):
    """Raised when Shopify reports zero role assignments for the contact."""

    status_code = 403
    error_code = "NO_ROLES_ASSIGNED"

    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(NO_ROLES_MESSAGE)


class ShopSessionNotFoundError(PortalError):
    status_code = 401
    error_code = "SHOP_SESSION_NOT_FOUND"

    def __init__(self, shop: str):
        self.shop = shop
        super().__init__(f"No session found for store: {shop}")


class ShopifyResponseError(PortalError):
    """Shopify returned a payload that does not match the expected shape."""

    status_code = 502
    error_code = "SHOPIFY_RESPONSE_INVALID"


class RoleNotFoundError(PortalError):
    status_code = 404
    error_code = "ROLE_NOT_FOUND"

    def __init__(self, role_id: str):
        self.role_id = role_id
        super().__init__(f"Role not found: {role_id}")


class RoleAssignmentsNotFoundError(PortalError):
    """Raised when a contact has no cached assignments in the given company."""

    status_code = 404
    error_code = "ROLE_ASSIGNMENTS_NOT_FOUND"

    def __init__(self, company_contact_id: str):
        self.company_contact_id = company_contact_id
        super().__init__("Role assignments not found")
