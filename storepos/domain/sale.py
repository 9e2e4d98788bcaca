"""
Sale Domain Models

A Sale is the persisted, append-only record of one checkout. Items carry
denormalized snapshots of the product name and unit price at sale time so
reports stay correct after catalog edits.

Author: TM3
Date: 2026-10-05
"""
from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal


class SaleItem(BaseModel):
    """
    Sale Item domain model - one line of a sale

    Fields:
        product_id: Catalog product ID
        product_name: Product name at sale time
        quantity: Units sold
        price: Unit price at sale time
        total: price * quantity
    """

    product_id: str = Field(..., description="Product catalog ID")
    product_name: str = Field(..., description="Product name at sale time")
    quantity: int = Field(..., description="Units sold", ge=1)
    price: Decimal = Field(..., description="Unit price", ge=0)
    total: Decimal = Field(..., description="Line total", ge=0)

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @classmethod
    def from_snapshot(cls, product_id: str, product_name: str, quantity: int, price: Decimal) -> "SaleItem":
        """Build a line item computing its total from the unit price"""
        return cls(
            product_id=product_id,
            product_name=product_name,
            quantity=quantity,
            price=price,
            total=price * quantity,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary with Decimal to float conversion"""
        data = self.model_dump()
        data['price'] = float(self.price)
        data['total'] = float(self.total)
        return data


class SaleCreate(BaseModel):
    """
    Payload for persisting a new sale

    total_amount must equal the sum of the item totals; the model refuses
    anything else so an inconsistent sale never reaches the store.
    """
    items: List[SaleItem] = Field(..., min_length=1)
    total_amount: Decimal = Field(..., ge=0)
    date: datetime
    invoice_number: Optional[str] = None
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    payment_method: str = "cash"
    status: str = "completed"
    notes: Optional[str] = None

    @model_validator(mode='after')
    def check_total_amount(self):
        expected = sum((item.total for item in self.items), Decimal('0'))
        if self.total_amount != expected:
            raise ValueError(f"total_amount {self.total_amount} does not match item totals {expected}")
        return self


class Sale(BaseModel):
    """
    Sale domain model - a persisted checkout

    Fields:
        id: Store-assigned sale ID
        items: Ordered sale items
        total_amount: Sum of item totals
        date: When the sale was committed

        # Optional details kept from the point of sale
        invoice_number: Printed invoice number
        customer_id: Customer reference
        customer_name: Customer display name
        payment_method: cash, card, ...
        status: Sale status (completed)
        notes: Free text
        created_at: When the record was written
    """

    id: str = Field(..., description="Sale ID")
    items: List[SaleItem] = Field(default_factory=list, description="Sale items")
    total_amount: Decimal = Field(Decimal('0'), description="Total sale amount", ge=0)
    date: datetime = Field(..., description="Sale timestamp")

    invoice_number: Optional[str] = Field(None, description="Invoice number")
    customer_id: Optional[str] = Field(None, description="Customer ID")
    customer_name: Optional[str] = Field(None, description="Customer name")
    payment_method: str = Field("cash", description="Payment method")
    status: str = Field("completed", description="Sale status")
    notes: Optional[str] = Field(None, description="Notes")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @property
    def total_quantity(self) -> int:
        """Total units across all items"""
        return sum(item.quantity for item in self.items)

    def to_dict(self) -> dict:
        """
        Convert to dictionary with computed fields

        Returns dict with all fields plus total_quantity
        """
        data = self.model_dump()
        data['total_amount'] = float(self.total_amount)
        data['total_quantity'] = self.total_quantity
        data['date'] = self.date.isoformat()
        if self.created_at:
            data['created_at'] = self.created_at.isoformat()
        data['items'] = [item.to_dict() for item in self.items]
        return data
