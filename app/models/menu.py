"""Menu-related models"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, JSON, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class Dish(Base):
    """Menu dish, sold in one or more size variants"""
    __tablename__ = "dishes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    category = Column(String(100))
    image_url = Column(String(500))
    is_active = Column(Boolean, default=True)
    display_order = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="dishes")
    prices = relationship("DishPrice", back_populates="dish", cascade="all, delete-orphan")
    modifier_groups = relationship("ModifierGroup", back_populates="dish", cascade="all, delete-orphan")


class DishPrice(Base):
    """Price of a dish for one size label"""
    __tablename__ = "dish_prices"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    dish_id = Column(UUID(as_uuid=True), ForeignKey("dishes.id"), nullable=False)
    size_variant = Column(String(100), nullable=False)  # "Small", "Large", "Regular"
    price_cents = Column(Integer, nullable=False)
    display_order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)

    # Relationships
    dish = relationship("Dish", back_populates="prices")


class ModifierGroup(Base):
    """Simple modifier group owned by a dish"""
    __tablename__ = "modifier_groups"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    dish_id = Column(UUID(as_uuid=True), ForeignKey("dishes.id"), nullable=False)
    name = Column(String(100), nullable=False)  # Toppings, Sauce, Cooking preference
    is_required = Column(Boolean, default=False)
    min_selections = Column(Integer, default=0)
    max_selections = Column(Integer, default=1)
    display_order = Column(Integer, default=0)

    # Relationships
    dish = relationship("Dish", back_populates="modifier_groups")
    modifiers = relationship("DishModifier", back_populates="group", cascade="all, delete-orphan")


class DishModifier(Base):
    """Individually priced add-on inside a simple modifier group"""
    __tablename__ = "dish_modifiers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    modifier_group_id = Column(UUID(as_uuid=True), ForeignKey("modifier_groups.id"), nullable=False)
    name = Column(String(100), nullable=False)
    price_cents = Column(Integer, nullable=False, default=0)
    is_default = Column(Boolean, default=False)
    placements = Column(JSON, default=list)  # ["whole", "left", "right"]
    display_order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)

    # Relationships
    group = relationship("ModifierGroup", back_populates="modifiers")


class ComboGroup(Base):
    """Combo definition (e.g. "2 pizzas, 4 toppings each") shared across dishes"""
    __tablename__ = "combo_groups"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    name = Column(String(255), nullable=False)
    number_of_items = Column(Integer, default=1)
    display_header = Column(String(255))
    deleted_at = Column(DateTime)

    # Relationships
    sections = relationship("ComboGroupSection", back_populates="combo_group", cascade="all, delete-orphan")


class DishComboGroup(Base):
    """Link between a dish and the combo groups offered with it"""
    __tablename__ = "dish_combo_groups"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    dish_id = Column(UUID(as_uuid=True), ForeignKey("dishes.id"), nullable=False)
    combo_group_id = Column(UUID(as_uuid=True), ForeignKey("combo_groups.id"), nullable=False)
    is_active = Column(Boolean, default=True)


class ComboGroupSection(Base):
    """Section of a combo group (toppings, dressings, sides...)"""
    __tablename__ = "combo_group_sections"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    combo_group_id = Column(UUID(as_uuid=True), ForeignKey("combo_groups.id"), nullable=False)
    section_type = Column(String(50))
    use_header = Column(String(255))
    display_order = Column(Integer, default=0)
    free_items = Column(Integer, default=0)  # first N selections in this section are free
    min_selection = Column(Integer, default=0)
    max_selection = Column(Integer)
    is_active = Column(Boolean, default=True)

    # Relationships
    combo_group = relationship("ComboGroup", back_populates="sections")
    modifier_groups = relationship("ComboModifierGroup", back_populates="section", cascade="all, delete-orphan")


class ComboModifierGroup(Base):
    """Modifier group inside a combo section"""
    __tablename__ = "combo_modifier_groups"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    combo_group_section_id = Column(UUID(as_uuid=True), ForeignKey("combo_group_sections.id"), nullable=False)
    name = Column(String(100), nullable=False)
    type_code = Column(String(20))
    is_selected = Column(Boolean, default=False)

    # Relationships
    section = relationship("ComboGroupSection", back_populates="modifier_groups")
    modifiers = relationship("ComboModifier", back_populates="group", cascade="all, delete-orphan")


class ComboModifier(Base):
    """Modifier inside a combo modifier group"""
    __tablename__ = "combo_modifiers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    combo_modifier_group_id = Column(UUID(as_uuid=True), ForeignKey("combo_modifier_groups.id"), nullable=False)
    name = Column(String(100), nullable=False)
    price_cents = Column(Integer)  # base price when no size-specific row applies
    placements = Column(JSON, default=list)
    display_order = Column(Integer, default=0)

    # Relationships
    group = relationship("ComboModifierGroup", back_populates="modifiers")
    prices = relationship("ComboModifierPrice", back_populates="modifier", cascade="all, delete-orphan")


class ComboModifierPrice(Base):
    """Size-specific price of a combo modifier"""
    __tablename__ = "combo_modifier_prices"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    combo_modifier_id = Column(UUID(as_uuid=True), ForeignKey("combo_modifiers.id"), nullable=False)
    size_variant = Column(String(100))
    price_cents = Column(Integer, nullable=False)

    # Relationships
    modifier = relationship("ComboModifier", back_populates="prices")
