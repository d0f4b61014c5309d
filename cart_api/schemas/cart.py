from typing import List, Union
from pydantic import BaseModel, Field


class AddItem(BaseModel):
    """Schema for adding an item to the cart."""
    id: int = Field(..., description="Product ID")
    quantity: Union[int, str] = Field(default=1, description="Quantity to add")


class AddItems(BaseModel):
    """Schema for adding several items at once."""
    items: List[AddItem] = Field(..., min_length=1)


class UpdateItem(BaseModel):
    """Schema for changing the quantity of a cart item. 0 removes the item."""
    quantity: Union[int, str]
