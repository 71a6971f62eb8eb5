"""
Modifier catalog views.

Dishes carry two kinds of modifier groups: simple groups owned by the dish,
and combo groups reached through the combo catalog (combo group -> sections ->
modifier groups -> modifiers with per-size prices). Both are mapped into
tagged variants and then flattened into one list of selectable groups.
"""

from collections import defaultdict
from typing import Dict, List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.menu import (
    ComboGroup,
    ComboGroupSection,
    ComboModifier,
    ComboModifierGroup as ComboModifierGroupRow,
    DishComboGroup,
    DishModifier,
    ModifierGroup,
)
from app.schemas.menu import (
    ComboModifierGroup,
    ComboSection,
    ComboSectionGroup,
    CustomizationResult,
    FlatModifierGroup,
    ModifierGroupVariant,
    ModifierOption,
    ModifierPrice,
    ModifierValidationError,
    SelectedModifier,
    SimpleModifierGroup,
)


def _simple_option(modifier: DishModifier) -> ModifierOption:
    return ModifierOption(
        id=modifier.id,
        name=modifier.name,
        price_cents=modifier.price_cents or 0,
        placements=modifier.placements or [],
        is_default=bool(modifier.is_default),
        display_order=modifier.display_order or 0,
    )


def _combo_option(modifier: ComboModifier) -> ModifierOption:
    return ModifierOption(
        id=modifier.id,
        name=modifier.name,
        price_cents=modifier.price_cents or 0,
        prices=[
            ModifierPrice(size_variant=p.size_variant, price_cents=p.price_cents)
            for p in modifier.prices
        ],
        placements=modifier.placements or [],
        display_order=modifier.display_order or 0,
    )


def build_simple_group(group: ModifierGroup) -> SimpleModifierGroup:
    """Map a dish-owned group; inactive modifiers are left out"""
    modifiers = sorted(
        (m for m in group.modifiers if m.is_active),
        key=lambda m: m.display_order or 0,
    )
    return SimpleModifierGroup(
        id=group.id,
        name=group.name,
        is_required=bool(group.is_required),
        min_selections=group.min_selections or 0,
        max_selections=group.max_selections,
        display_order=group.display_order or 0,
        modifiers=[_simple_option(m) for m in modifiers],
    )


def build_combo_group(combo: ComboGroup) -> ComboModifierGroup:
    """Map a combo group; inactive sections are left out"""
    sections = sorted(
        (s for s in combo.sections if s.is_active),
        key=lambda s: s.display_order or 0,
    )
    return ComboModifierGroup(
        id=combo.id,
        name=combo.name,
        number_of_items=combo.number_of_items or 1,
        display_header=combo.display_header,
        sections=[
            ComboSection(
                id=section.id,
                header=section.use_header,
                section_type=section.section_type,
                free_items=section.free_items or 0,
                min_selection=section.min_selection or 0,
                max_selection=section.max_selection,
                display_order=section.display_order or 0,
                groups=[
                    ComboSectionGroup(
                        id=group.id,
                        name=group.name,
                        type_code=group.type_code,
                        is_selected=bool(group.is_selected),
                        modifiers=[
                            _combo_option(m)
                            for m in sorted(group.modifiers, key=lambda m: m.display_order or 0)
                        ],
                    )
                    for group in section.modifier_groups
                ],
            )
            for section in sections
        ],
    )


def flatten_groups(groups: List[ModifierGroupVariant]) -> List[FlatModifierGroup]:
    """One flat entry per simple group and per combo (section, group) pair"""
    flat: List[FlatModifierGroup] = []

    for group in groups:
        if isinstance(group, SimpleModifierGroup):
            flat.append(FlatModifierGroup(
                source="simple",
                group_id=group.id,
                name=group.name,
                is_required=group.is_required,
                min_selections=group.min_selections,
                max_selections=group.max_selections,
                display_order=group.display_order,
                modifiers=group.modifiers,
            ))
            continue

        for section in group.sections:
            for section_group in section.groups:
                flat.append(FlatModifierGroup(
                    source="combo",
                    group_id=section_group.id,
                    name=section_group.name,
                    header=section.header or group.display_header,
                    is_required=section.min_selection > 0,
                    min_selections=section.min_selection,
                    max_selections=section.max_selection,
                    free_items=section.free_items,
                    display_order=section.display_order,
                    modifiers=section_group.modifiers,
                ))

    return flat


async def load_dish_modifier_groups(db: AsyncSession, dish_id: UUID) -> List[ModifierGroupVariant]:
    """Load simple and combo groups for a dish"""
    simple_result = await db.execute(
        select(ModifierGroup)
        .where(ModifierGroup.dish_id == dish_id)
        .options(selectinload(ModifierGroup.modifiers))
        .order_by(ModifierGroup.display_order)
    )
    simple_groups = [build_simple_group(g) for g in simple_result.scalars().all()]

    combo_result = await db.execute(
        select(ComboGroup)
        .join(DishComboGroup, DishComboGroup.combo_group_id == ComboGroup.id)
        .where(
            DishComboGroup.dish_id == dish_id,
            DishComboGroup.is_active == True,
            ComboGroup.deleted_at.is_(None),
        )
        .options(
            selectinload(ComboGroup.sections)
            .selectinload(ComboGroupSection.modifier_groups)
            .selectinload(ComboModifierGroupRow.modifiers)
            .selectinload(ComboModifier.prices)
        )
    )
    combo_groups = [build_combo_group(c) for c in combo_result.scalars().unique().all()]

    return [*simple_groups, *combo_groups]


def validate_modifier_selections(
    groups: List[FlatModifierGroup],
    selected: List[SelectedModifier],
) -> CustomizationResult:
    """Check required/min/max rules of every group against a selection"""
    errors: List[ModifierValidationError] = []
    by_group: Dict[UUID, List[SelectedModifier]] = defaultdict(list)
    total_price = 0

    for selection in selected:
        by_group[selection.group_id].append(selection)
        total_price += selection.price_cents

    for group in groups:
        count = len(by_group.get(group.group_id, []))
        label = group.name.lower()

        if group.is_required and count == 0:
            errors.append(ModifierValidationError(
                group_id=group.group_id,
                group_name=group.name,
                message=f"Please select a {label}",
                type="required",
            ))

        if count < group.min_selections:
            errors.append(ModifierValidationError(
                group_id=group.group_id,
                group_name=group.name,
                message=f"Select at least {group.min_selections} {label}",
                type="min_selections",
            ))

        if group.max_selections is not None and count > group.max_selections:
            errors.append(ModifierValidationError(
                group_id=group.group_id,
                group_name=group.name,
                message=f"Select at most {group.max_selections} {label}",
                type="max_selections",
            ))

    return CustomizationResult(
        is_valid=not errors,
        errors=errors,
        total_modifier_price_cents=total_price,
    )
