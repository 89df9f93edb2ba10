"""Customer details schemas: Shopify payload shapes and the portal response."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, Field
from pydantic.alias_generators import to_camel

from b2bkit.api import normalize_store_domain

CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


def _store_domain(value: str) -> str:
    domain = normalize_store_domain(value)
    if not domain:
        raise ValueError("store name must not be blank")
    return domain


# Cached rows and sessions are keyed by the canonical ``<shop>.myshopify.com`` form.
StoreName = Annotated[str, Field(min_length=1), AfterValidator(_store_domain)]


class CustomerDetailsRequest(BaseModel):
    store_name: StoreName
    customer_id: str = Field(min_length=1)

    model_config = {**CAMEL, "extra": "forbid"}


# ---------------------------------------------------------------------------
# Shopify GraphQL payload (validated at the boundary)
# ---------------------------------------------------------------------------


class ShopifyRef(BaseModel):
    id: str
    name: str

    model_config = CAMEL


class ShopifyRoleAssignmentNode(BaseModel):
    id: str
    role: ShopifyRef
    company: ShopifyRef
    company_location: ShopifyRef | None = None

    model_config = CAMEL


class ShopifyRoleAssignmentEdge(BaseModel):
    node: ShopifyRoleAssignmentNode


class ShopifyRoleAssignmentConnection(BaseModel):
    edges: list[ShopifyRoleAssignmentEdge] = []


class ExternalRoleAssignment(BaseModel):
    """Flattened Shopify role assignment."""

    assignment_id: str
    role_name: str
    company_id: str
    company_name: str | None = None
    company_location_id: str | None = None
    company_location_name: str | None = None

    @classmethod
    def from_node(cls, node: ShopifyRoleAssignmentNode) -> "ExternalRoleAssignment":
        location = node.company_location
        return cls(
            assignment_id=node.id,
            role_name=node.role.name,
            company_id=node.company.id,
            company_name=node.company.name,
            company_location_id=location.id if location else None,
            company_location_name=location.name if location else None,
        )


class ShopifyCompanyContactProfile(BaseModel):
    id: str
    is_main_contact: bool = False
    company: ShopifyRef
    role_assignments: ShopifyRoleAssignmentConnection = Field(
        default_factory=ShopifyRoleAssignmentConnection
    )

    model_config = CAMEL

    def assignments(self) -> list[ExternalRoleAssignment]:
        return [ExternalRoleAssignment.from_node(edge.node) for edge in self.role_assignments.edges]


class ShopifyCustomer(BaseModel):
    id: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    state: str | None = None
    company_contact_profiles: list[ShopifyCompanyContactProfile] = []

    model_config = CAMEL


# ---------------------------------------------------------------------------
# Portal response
# ---------------------------------------------------------------------------


class CustomerInfo(BaseModel):
    id: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    state: str | None = None
    company_id: str
    company_contact_id: str

    model_config = CAMEL


class CompanyInfo(BaseModel):
    id: str
    name: str

    model_config = CAMEL


class LocationRole(BaseModel):
    kind: Literal["location"] = "location"
    id: str
    name: str
    company_location_id: str
    company_location_name: str | None = None

    model_config = CAMEL


class CompanyRole(BaseModel):
    kind: Literal["company"] = "company"
    id: str
    name: str
    company_id: str

    model_config = CAMEL


Role = Annotated[LocationRole | CompanyRole, Field(discriminator="kind")]


class CustomerDetailsResponse(BaseModel):
    customer: CustomerInfo
    company: CompanyInfo
    roles: list[Role] = []

    model_config = CAMEL


class CustomerDetailsPayload(CustomerDetailsResponse):
    warnings: list[str] = []


class CustomerDetailsResult(BaseModel):
    """Resolved details plus non-fatal problems hit while syncing the role cache."""

    data: CustomerDetailsResponse
    warnings: list[str] = []

    def to_payload(self) -> CustomerDetailsPayload:
        return CustomerDetailsPayload(**self.data.model_dump(), warnings=self.warnings)
