"""Companies API - B2B contact roles and role assignments."""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

from .client import ShopifyUserError, extract_operation_name

if TYPE_CHECKING:
    from .client import ShopifyClient

LOCATION_CONTACT_ROLES_QUERY = """
query GetCompanyLocation($id: ID!) {
  companyLocation(id: $id) {
    id
    company {
      contactRoles(first: 10) {
        nodes { id name note }
      }
    }
  }
}
"""

ASSIGN_LOCATION_ROLES_MUTATION = """
mutation companyLocationAssignRoles($companyLocationId: ID!, $rolesToAssign: [CompanyLocationRoleAssign!]!) {
  companyLocationAssignRoles(companyLocationId: $companyLocationId, rolesToAssign: $rolesToAssign) {
    roleAssignments { id }
    userErrors { field message }
  }
}
"""

REVOKE_CONTACT_ROLE_MUTATION = """
mutation companyContactRevokeRole($companyContactId: ID!, $companyContactRoleAssignmentId: ID!) {
  companyContactRevokeRole(
    companyContactId: $companyContactId
    companyContactRoleAssignmentId: $companyContactRoleAssignmentId
  ) {
    revokedCompanyContactRoleAssignmentId
    userErrors { field message }
  }
}
"""

DELETE_CONTACT_MUTATION = """
mutation companyContactDelete($companyContactId: ID!) {
  companyContactDelete(companyContactId: $companyContactId) {
    deletedCompanyContactId
    userErrors { field message }
  }
}
"""


def _check_user_errors(document: str, result: dict[str, Any]) -> None:
    errors = result.get("userErrors") or []
    if errors:
        messages = [e.get("message", str(e)) for e in errors]
        raise ShopifyUserError(
            "; ".join(messages),
            errors=errors,
            operation_name=extract_operation_name(document),
        )


class CompaniesAPI:
    """Companies API for B2B contact-role management.

    Usage:
        async with ShopifyClient(config) as shopify:
            roles = await shopify.companies.contact_roles(location_id)
            ids = await shopify.companies.assign_location_role(location_id, contact_id, roles[0]["id"])
            await shopify.companies.revoke_contact_role(contact_id, ids[0])
            await shopify.companies.delete_contact(contact_id)
    """

    def __init__(self, client: "ShopifyClient"):
        self._client = client

    async def contact_roles(self, company_location_id: str) -> list[dict[str, Any]]:
        """List the contact roles defined on the company owning a location.

        Returns:
            [{"id": ..., "name": ..., "note": ...}, ...] or [] for an unknown location.
        """
        data = await self._client._graphql(
            LOCATION_CONTACT_ROLES_QUERY, {"id": company_location_id}
        )
        location = data.get("companyLocation") or {}
        company = location.get("company") or {}
        return list((company.get("contactRoles") or {}).get("nodes") or [])

    async def assign_location_role(
        self, company_location_id: str, company_contact_id: str, company_contact_role_id: str
    ) -> list[str]:
        """Assign a Shopify contact role to a contact at one location.

        Returns:
            The ids of the created role assignments.
        """
        data = await self._client._graphql(ASSIGN_LOCATION_ROLES_MUTATION, {
            "companyLocationId": company_location_id,
            "rolesToAssign": [{
                "companyContactId": company_contact_id,
                "companyContactRoleId": company_contact_role_id,
            }],
        })
        result = data.get("companyLocationAssignRoles") or {}
        _check_user_errors(ASSIGN_LOCATION_ROLES_MUTATION, result)
        return [a["id"] for a in result.get("roleAssignments") or [] if a.get("id")]

    async def revoke_contact_role(self, company_contact_id: str, assignment_id: str) -> str | None:
        """Revoke one role assignment from a contact. Returns the revoked id."""
        data = await self._client._graphql(REVOKE_CONTACT_ROLE_MUTATION, {
            "companyContactId": company_contact_id,
            "companyContactRoleAssignmentId": assignment_id,
        })
        result = data.get("companyContactRevokeRole") or {}
        _check_user_errors(REVOKE_CONTACT_ROLE_MUTATION, result)
        return result.get("revokedCompanyContactRoleAssignmentId")

    async def delete_contact(self, company_contact_id: str) -> str | None:
        data = await self._client._graphql(
            DELETE_CONTACT_MUTATION, {"companyContactId": company_contact_id}
        )
        result = data.get("companyContactDelete") or {}
        _check_user_errors(DELETE_CONTACT_MUTATION, result)
        return result.get("deletedCompanyContactId")
