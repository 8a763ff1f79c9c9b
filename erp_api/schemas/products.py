import uuid
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, model_validator

from .base import Money, RequestModel


class PricingIn(RequestModel):
    cost_price: Optional[Money] = None
    selling_price: Optional[Money] = None
    discount: Optional[Decimal] = Field(None, ge=0, le=100)
    tax_rate: Optional[Decimal] = Field(None, ge=0, le=100)


class InventoryIn(RequestModel):
    current_stock: Optional[int] = Field(None, ge=0)
    min_stock: Optional[int] = Field(None, ge=0)
    max_stock: Optional[int] = Field(None, ge=0)
    reorder_point: Optional[int] = Field(None, ge=0)
    reorder_quantity: Optional[int] = Field(None, ge=0)


class ProductFields(RequestModel):
    barcode: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    brand: Optional[str] = Field(None, max_length=100)
    supplier: Optional[uuid.UUID] = None
    inventory: Optional[InventoryIn] = None
    tags: Optional[List[str]] = None
    images: Optional[List[dict]] = None
    specifications: Optional[dict] = None
    is_digital: Optional[bool] = None


class ProductCreate(ProductFields):
    name: str = Field(min_length=1, max_length=200)
    sku: str = Field(min_length=1, max_length=50)
    category: uuid.UUID
    pricing: PricingIn

    @model_validator(mode='after')
    def require_prices(self):
        if self.pricing.cost_price is None or self.pricing.selling_price is None:
            raise ValueError('pricing.costPrice and pricing.sellingPrice are required')
        return self


class ProductUpdate(ProductFields):
    not_null = ('name', 'sku', 'category', 'pricing')

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    sku: Optional[str] = Field(None, min_length=1, max_length=50)
    category: Optional[uuid.UUID] = None
    pricing: Optional[PricingIn] = None
    is_active: Optional[bool] = None


class StockUpdateIn(RequestModel):
    quantity: int = Field(ge=0)
    # Checked by the stock operation so unknown values get "Invalid operation".
    operation: str = 'set'
    reason: Optional[str] = Field(None, max_length=255)
    reference: Optional[str] = Field(None, max_length=100)
