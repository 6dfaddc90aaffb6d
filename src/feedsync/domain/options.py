"""Plan and apply the option shape of a single-variant catalog entry.

The remote API can create a product with one base variant and can append option
axes afterwards, but has no atomic replace. Appending axes to an entry that still
carries a single legacy axis makes the platform materialize a second variant, so
that shape is always normalized by removing every axis and recreating the full set.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Final

from feedsync.domain.errors import RemoteCatalogError, VariantInvariantError
from feedsync.domain.model import OptionAxis, normalize_text

if TYPE_CHECKING:
    from collections.abc import Sequence

    from feedsync.domain.model import CatalogRecord, RemoteCatalogEntry
    from feedsync.domain.ports import RemoteCatalog

log = getLogger(__name__)

# Axis name -> record attribute, in position order.
OPTION_SOURCES: Final[tuple[tuple[str, str], ...]] = (
    ("Color", "dial"),
    ("Size", "diameter"),
    ("Material", "metal_type"),
)


class EditKind(StrEnum):
    NOOP = "noop"
    ADDITIVE = "additive"
    RECREATE = "recreate"


@dataclass(slots=True, frozen=True)
class EditPlan:
    kind: EditKind
    desired: tuple[OptionAxis, ...]
    axes_to_create: tuple[OptionAxis, ...] = ()
    reason: str = ""

    @property
    def desired_values(self) -> tuple[str, ...]:
        return tuple(axis.value for axis in self.desired)


def existing_axes(entry: RemoteCatalogEntry) -> tuple[OptionAxis, ...]:
    """Real (non-placeholder) axes of ``entry`` with the value its variant carries."""

    variant = entry.variant
    axes: list[OptionAxis] = []
    for index, option in enumerate(sorted(entry.options, key=lambda item: item.position)):
        if option.is_placeholder:
            continue
        value = variant.option_values[index] if index < len(variant.option_values) else ""
        axes.append(OptionAxis(option.name, option.position, value))
    return tuple(axes)


def _matches(entry: RemoteCatalogEntry, axis: OptionAxis) -> bool:
    for option in entry.real_options:
        if option.name == axis.name and option.position == axis.position:
            return option.values == (axis.value,)
    return False


@dataclass(slots=True)
class VariantOptionPlanner:
    sources: tuple[tuple[str, str], ...] = OPTION_SOURCES

    def desired_axes(self, record: CatalogRecord) -> tuple[OptionAxis, ...]:
        axes: list[OptionAxis] = []
        for name, attribute in self.sources:
            value = normalize_text(getattr(record, attribute))
            if value is None:
                continue
            axes.append(OptionAxis(name=name, position=len(axes) + 1, value=value))
        return tuple(axes)

    def plan(self, existing: RemoteCatalogEntry, desired: Sequence[OptionAxis]) -> EditPlan:
        desired = tuple(desired)
        current = existing_axes(existing)

        if not desired:
            if not current:
                return EditPlan(EditKind.NOOP, desired, reason="no axes wanted or present")
            return EditPlan(EditKind.RECREATE, desired, reason="all axes removed")

        if current == desired and all(_matches(existing, axis) for axis in desired):
            if not existing.has_placeholder_option:
                return EditPlan(EditKind.NOOP, desired, reason="axes already match")

        if existing.has_placeholder_option:
            return EditPlan(EditKind.RECREATE, desired, desired, reason="placeholder axis present")

        if not existing.options:
            return EditPlan(EditKind.ADDITIVE, desired, desired, reason="entry has no axes")

        if len(current) == 1 and len(desired) > 1:
            return EditPlan(EditKind.RECREATE, desired, desired, reason="legacy single axis")

        if len(current) < len(desired) and desired[: len(current)] == current:
            if all(_matches(existing, axis) for axis in current):
                return EditPlan(
                    EditKind.ADDITIVE,
                    desired,
                    desired[len(current) :],
                    reason="appending axes",
                )

        return EditPlan(EditKind.RECREATE, desired, desired, reason="axis values changed")

    def execute(
        self,
        catalog: RemoteCatalog,
        entry: RemoteCatalogEntry,
        plan: EditPlan,
    ) -> RemoteCatalogEntry:
        """Run ``plan`` against ``entry`` and verify the single-variant postcondition."""

        if plan.kind is EditKind.NOOP:
            return entry

        variant_id = entry.variant.id
        log.debug("Option plan for %s: %s (%s)", entry.id, plan.kind, plan.reason)
        if plan.kind is EditKind.ADDITIVE:
            catalog.create_options(entry.id, plan.axes_to_create)
        else:
            catalog.remove_options(entry.id)
            if plan.desired:
                catalog.create_options(entry.id, plan.desired)
                catalog.update_variant_options(entry.id, variant_id, plan.desired_values)

        refreshed = catalog.get_entry(entry.id)
        if refreshed is None:
            raise RemoteCatalogError(f"Entry {entry.id} vanished while shaping options")
        self.verify(refreshed, plan, variant_id=variant_id)
        return refreshed

    @staticmethod
    def verify(entry: RemoteCatalogEntry, plan: EditPlan, *, variant_id: str) -> None:
        if len(entry.variants) != 1:
            log.error(
                "Entry %s has %s variants after %s option plan",
                entry.id,
                len(entry.variants),
                plan.kind,
            )
            raise VariantInvariantError(
                f"Entry {entry.id} has {len(entry.variants)} variants after option edit"
            )
        if entry.variant.id != variant_id:
            log.error("Entry %s variant replaced: %s -> %s", entry.id, variant_id, entry.variant.id)
            raise VariantInvariantError(f"Entry {entry.id} variant was recreated")
        actual = tuple(axis.value for axis in existing_axes(entry))
        if actual != plan.desired_values:
            log.error(
                "Entry %s option values %s differ from desired %s",
                entry.id,
                actual,
                plan.desired_values,
            )
            raise VariantInvariantError(
                f"Entry {entry.id} option values {actual} != {plan.desired_values}"
            )
