"""
Override merging — layering an evolution's payload over the defaults.

A field present in the override wins; an absent (``None``) field keeps the
baseline value. Role permissions are merged role by role.
"""

from typing import Callable, Dict, Optional

from pydantic import BaseModel

from evolution_kernel.models.parameters import (
    EvolutionCategory,
    ParameterOverride,
    ParameterSet,
    RolePermissions,
    RolePermissionsOverride,
)

ROLE_NAMES = tuple(RolePermissions.model_fields)


def merge_fields(base: BaseModel, override: Optional[BaseModel]) -> BaseModel:
    """Shallow merge: every non-None override field replaces the base value."""
    if override is None:
        return base.model_copy(deep=True)
    updates = override.model_dump(exclude_none=True, exclude={"category"})
    return base.model_copy(update=updates, deep=True)


def merge_role_permissions(
    base: RolePermissions,
    override: RolePermissionsOverride,
) -> RolePermissions:
    """Merge each role sub-object independently over its own default."""
    return RolePermissions(**{
        role: merge_fields(getattr(base, role), getattr(override, role))
        for role in ROLE_NAMES
    })


_MERGERS: Dict[EvolutionCategory, Callable[..., ParameterSet]] = {
    EvolutionCategory.VOTE_PARAMETERS: merge_fields,
    EvolutionCategory.CREDIBILITY_RULES: merge_fields,
    EvolutionCategory.ROLE_PERMISSIONS: merge_role_permissions,
}


def merge_overrides(
    base: ParameterSet,
    override: Optional[ParameterOverride],
) -> ParameterSet:
    """Layer an override payload over a parameter set of the same category."""
    if override is None:
        return base.model_copy(deep=True)
    merger = _MERGERS[EvolutionCategory(override.category)]
    return merger(base, override)
