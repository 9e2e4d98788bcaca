"""
Product Domain Model

Represents a product entity in the store catalog.
This is the single source of truth for product data structure.

Author: TM3
Date: 2026-10-05
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime
from decimal import Decimal

DEFAULT_CATEGORY = "Uncategorized"


class Product(BaseModel):
    """
    Product domain model - represents a product in our catalog

    Fields:
        id: Store-assigned product ID
        name: Product name
        category: Product category (defaults to "Uncategorized")
        price: Unit selling price
        stock: Units currently available (never negative)
        description: Product description (optional)
        image_url: Product image location (optional)
        created_at: When product was created
        updated_at: When product was last updated
    """

    id: str = Field(..., description="Store-assigned product ID")
    name: str = Field(..., description="Product name")
    category: str = Field(DEFAULT_CATEGORY, description="Product category")
    price: Decimal = Field(..., description="Unit price", ge=0)
    stock: int = Field(0, description="Units in stock", ge=0)

    description: Optional[str] = Field(None, description="Product description")
    image_url: Optional[str] = Field(None, description="Image URL")

    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_out_of_stock(self) -> bool:
        """Check if product is out of stock"""
        return self.stock <= 0

    def is_low_stock(self, threshold: int) -> bool:
        """Check if product stock is below the alert threshold"""
        return self.stock < threshold

    def to_dict(self) -> dict:
        """
        Convert to dictionary with computed fields

        Decimal and datetime values are converted for JSON responses.
        """
        data = self.model_dump()
        data['price'] = float(self.price)
        data['is_out_of_stock'] = self.is_out_of_stock
        data['created_at'] = self.created_at.isoformat()
        if self.updated_at:
            data['updated_at'] = self.updated_at.isoformat()
        return data


class ProductCreate(BaseModel):
    """Schema for creating a new product"""
    name: str = Field(..., min_length=1)
    category: str = DEFAULT_CATEGORY
    price: Decimal = Field(..., ge=0)
    stock: int = Field(0, ge=0)
    description: Optional[str] = None
    image_url: Optional[str] = None


class ProductUpdate(BaseModel):
    """Schema for updating an existing product"""
    name: Optional[str] = None
    category: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    image_url: Optional[str] = None
