"""Menu schemas"""

from typing import Annotated, Optional, List, Literal, Union
from uuid import UUID
from pydantic import BaseModel, Field


class DishPriceResponse(BaseModel):
    """Size variant and its price"""
    size_variant: str
    price_cents: int

    class Config:
        from_attributes = True


class DishResponse(BaseModel):
    """Dish with its active size prices"""
    id: UUID
    name: str
    description: Optional[str]
    category: Optional[str]
    image_url: Optional[str]
    prices: List[DishPriceResponse] = []


class RestaurantResponse(BaseModel):
    """Public restaurant details"""
    id: UUID
    name: str
    slug: str
    phone: Optional[str]
    address: Optional[str]
    city: Optional[str]
    province: Optional[str]
    postal_code: Optional[str]
    logo_url: Optional[str]
    delivery_fee_cents: int = 0
    min_order_cents: int = 0

    class Config:
        from_attributes = True


class MenuResponse(BaseModel):
    """Restaurant menu grouped by category"""
    restaurant: RestaurantResponse
    categories: dict  # {"Pizza": [DishResponse, ...], ...}


class ModifierPrice(BaseModel):
    size_variant: Optional[str] = None
    price_cents: int


class ModifierOption(BaseModel):
    """Selectable modifier inside a group"""
    id: UUID
    name: str
    price_cents: int = 0
    prices: List[ModifierPrice] = []
    placements: List[str] = []
    is_default: bool = False
    display_order: int = 0


class SimpleModifierGroup(BaseModel):
    """Modifier group owned directly by a dish"""
    kind: Literal["simple"] = "simple"
    id: UUID
    name: str
    is_required: bool = False
    min_selections: int = 0
    max_selections: Optional[int] = 1
    display_order: int = 0
    modifiers: List[ModifierOption] = []


class ComboSectionGroup(BaseModel):
    id: UUID
    name: str
    type_code: Optional[str] = None
    is_selected: bool = False
    modifiers: List[ModifierOption] = []


class ComboSection(BaseModel):
    """Section of a combo with its free allowance and selection bounds"""
    id: UUID
    header: Optional[str] = None
    section_type: Optional[str] = None
    free_items: int = 0
    min_selection: int = 0
    max_selection: Optional[int] = None
    display_order: int = 0
    groups: List[ComboSectionGroup] = []


class ComboModifierGroup(BaseModel):
    """Combo group linked to a dish through the combo catalog"""
    kind: Literal["combo"] = "combo"
    id: UUID
    name: str
    number_of_items: int = 1
    display_header: Optional[str] = None
    sections: List[ComboSection] = []


ModifierGroupVariant = Annotated[Union[SimpleModifierGroup, ComboModifierGroup], Field(discriminator="kind")]


class FlatModifierGroup(BaseModel):
    """Shared view of any modifier group, one per selectable list"""
    source: Literal["simple", "combo"]
    group_id: UUID
    name: str
    header: Optional[str] = None
    is_required: bool = False
    min_selections: int = 0
    max_selections: Optional[int] = None
    free_items: int = 0
    display_order: int = 0
    modifiers: List[ModifierOption] = []


class DishModifiersResponse(BaseModel):
    """Modifier groups of a dish, both as tagged variants and flattened"""
    dish_id: UUID
    groups: List[ModifierGroupVariant] = []
    flat: List[FlatModifierGroup] = []


class SelectedModifier(BaseModel):
    group_id: UUID
    modifier_id: UUID
    price_cents: int = 0


class CustomizationRequest(BaseModel):
    size: Optional[str] = None
    quantity: int = Field(1, ge=1)
    modifiers: List[SelectedModifier] = []


class ModifierValidationError(BaseModel):
    group_id: UUID
    group_name: str
    message: str
    type: Literal["required", "min_selections", "max_selections"]


class CustomizationResult(BaseModel):
    is_valid: bool
    errors: List[ModifierValidationError] = []
    total_modifier_price_cents: int = 0
