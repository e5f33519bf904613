"""API dependencies for caller identification and listing parameters."""

from typing import Annotated

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ConfigDict, Field

from kural.core.logging_config import access_logger
from kural.core.responses import unauthorized_response
from kural.core.security import decode_access_token
from kural.services.filters import FilterSpec, build_filter_spec
from kural.services.listing import VoterCategory
from kural.services.pagination import PageRequest

security = HTTPBearer(auto_error=False)

Loose = int | float | str | None


async def get_optional_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> dict | None:
    """
    Dependency identifying the caller when a bearer token is sent.

    No token means an anonymous caller (None). A token that does not verify
    is rejected with 401 rather than silently treated as anonymous.
    """
    if credentials is None:
        return None

    ip_address = request.client.host if request.client else None
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        access_logger.log_rejected_token("invalid or expired", ip_address)
        raise unauthorized_response("Invalid authentication credentials")

    user_id = payload.get("sub")
    if user_id is None:
        access_logger.log_rejected_token("missing subject", ip_address)
        raise unauthorized_response("Invalid authentication credentials")

    return {"id": str(user_id), "role": payload.get("role")}


def caller_id(user: dict | None) -> str | None:
    return user["id"] if user else None


def split_fields(raw: str | list[str] | None) -> list[str] | None:
    """Parse a comma-separated (or already split) list of logical field names."""
    if not raw:
        return None
    items = raw.split(",") if isinstance(raw, str) else raw
    fields = [item.strip() for item in items if item and item.strip()]
    return fields or None


class ListingQuery(BaseModel):
    """
    Paging, search and sort parameters shared by every listing.

    Values are kept loose (number or text) so that malformed input can be
    ignored by the filter builder instead of failing validation.
    """

    model_config = ConfigDict(populate_by_name=True)

    page: Loose = None
    limit: Loose = None
    q: Loose = None
    age: Loose = None
    min_age: Loose = Field(None, alias="minAge")
    max_age: Loose = Field(None, alias="maxAge")
    part_no: Loose = Field(None, alias="partNo")
    serial_no: Loose = Field(None, alias="serialNo")
    name: Loose = Field(None, alias="Name")
    father_name: Loose = Field(None, alias="Father Name")
    number: Loose = Field(None, alias="Number")
    mobile_no: Loose = Field(None, alias="mobileNo")
    first_name: Loose = Field(None, alias="firstName")
    last_name: Loose = Field(None, alias="lastName")
    relation_first_name: Loose = Field(None, alias="relationFirstName")
    relation_last_name: Loose = Field(None, alias="relationLastName")
    search_in: str | list[str] | None = Field(None, alias="searchIn")
    sort_by: str | None = Field(None, alias="sortBy")
    sort_order: str = Field("asc", alias="sortOrder")

    def page_request(self) -> PageRequest:
        return PageRequest.from_params(self.page, self.limit)

    def filter_spec(self, category: VoterCategory) -> FilterSpec:
        return build_filter_spec(
            category.key,
            category.search_fields,
            q=self.q,
            search_in=split_fields(self.search_in),
            age=self.age,
            min_age=self.min_age,
            max_age=self.max_age,
            part_no=self.part_no,
            serial_no=self.serial_no,
            name=self.name,
            father_name=self.father_name,
            number=self.number,
            mobile_no=self.mobile_no,
            first_name=self.first_name,
            last_name=self.last_name,
            relation_first_name=self.relation_first_name,
            relation_last_name=self.relation_last_name,
        )


def listing_query(
    page: str | None = None,
    limit: str | None = None,
    q: str | None = None,
    age: str | None = None,
    min_age: Annotated[str | None, Query(alias="minAge")] = None,
    max_age: Annotated[str | None, Query(alias="maxAge")] = None,
    part_no: Annotated[str | None, Query(alias="partNo")] = None,
    serial_no: Annotated[str | None, Query(alias="serialNo")] = None,
    name: Annotated[str | None, Query(alias="Name")] = None,
    father_name: Annotated[str | None, Query(alias="Father Name")] = None,
    number: Annotated[str | None, Query(alias="Number")] = None,
    mobile_no: Annotated[str | None, Query(alias="mobileNo")] = None,
    first_name: Annotated[str | None, Query(alias="firstName")] = None,
    last_name: Annotated[str | None, Query(alias="lastName")] = None,
    relation_first_name: Annotated[str | None, Query(alias="relationFirstName")] = None,
    relation_last_name: Annotated[str | None, Query(alias="relationLastName")] = None,
    search_in: Annotated[str | None, Query(alias="searchIn")] = None,
    sort_by: Annotated[str | None, Query(alias="sortBy")] = None,
    sort_order: Annotated[str, Query(alias="sortOrder")] = "asc",
) -> ListingQuery:
    """Dependency collecting the listing parameters from the query string."""
    return ListingQuery(
        page=page,
        limit=limit,
        q=q,
        age=age,
        min_age=min_age,
        max_age=max_age,
        part_no=part_no,
        serial_no=serial_no,
        name=name,
        father_name=father_name,
        number=number,
        mobile_no=mobile_no,
        first_name=first_name,
        last_name=last_name,
        relation_first_name=relation_first_name,
        relation_last_name=relation_last_name,
        search_in=search_in,
        sort_by=sort_by,
        sort_order=sort_order,
    )
