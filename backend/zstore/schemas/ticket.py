"""Ticket Schemas — Pydantic models for the storefront's ticket endpoints.

Invariants:
    - Wire names are camelCase (buyerName, sellerId, ...) as sent by the storefront JS
    - Every string field is stripped and non-empty; price is an integer >= 0
    - CreateTicketRequest.to_ticket() is the only way a TransactionTicket enters the core

Design Decisions:
    - Field aliases over camelCase attribute names: Python code stays snake_case
    - sellerId accepted as int or str: Discord snowflakes arrive as either from the browser
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from zstore.core.domain_types import CloseStatus, PrincipalId, TransactionTicket


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class CreateTicketRequest(_WireModel):
    """Order details posted by the storefront when a buyer checks out."""
    buyer_name: str = Field(alias="buyerName", min_length=1, max_length=100)
    seller_id: str = Field(alias="sellerId", min_length=1, max_length=32)
    product_name: str = Field(alias="productName", min_length=1, max_length=1024)
    price: int = Field(ge=0)
    brand_name: str = Field(alias="brandName", min_length=1, max_length=100)
    method: str = Field(min_length=1, max_length=1024)

    @field_validator("seller_id", mode="before")
    @classmethod
    def coerce_snowflake(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    def to_ticket(self) -> TransactionTicket:
        return TransactionTicket(
            buyer_name=self.buyer_name,
            counterparty_id=PrincipalId(self.seller_id),
            product_name=self.product_name,
            price=self.price,
            brand_name=self.brand_name,
            method=self.method,
        )


class CreateTicketResponse(_WireModel):
    success: bool = True
    channel_url: str = Field(serialization_alias="channelUrl")


class CloseTicketRequest(_WireModel):
    """Seller-initiated close of a ticket channel."""
    channel_id: str = Field(alias="channelId", min_length=1, max_length=32)
    seller_name: str = Field(alias="sellerName", min_length=1, max_length=100)

    @field_validator("channel_id", mode="before")
    @classmethod
    def coerce_snowflake(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class CloseTicketResponse(_WireModel):
    success: bool = True
    status: CloseStatus
    delete_after_seconds: float | None = Field(
        None, serialization_alias="deleteAfterSeconds",
    )
