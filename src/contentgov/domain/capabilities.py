"""Capability registry, content type validity, compatibility and templates.

Provides:
- ``CONTENT_TYPE_CAPABILITIES`` - capabilities meaningful per content type.
- ``compatible_capabilities()`` / ``is_compatible()`` - which capabilities
  transfer from one content type to another.
- ``TEMPLATES`` / ``template_capabilities()`` - named presets
  (Viewer ⊂ Author ⊂ Admin).
- Capability categories used for advisory permission levels.

Everything here is pure. Unknown template or capability names are
programming errors and raise immediately.
"""

from __future__ import annotations

from collections.abc import Iterable

from contentgov.domain.value_objects import (
    Capability,
    CapabilityGrant,
    CapabilityMode,
    ContentType,
)

ALL_CAPABILITIES: frozenset[Capability] = frozenset(Capability)

# ── Categories ──────────────────────────────────────────

VIEW_CAPABILITIES: tuple[Capability, ...] = (
    Capability.READ,
    Capability.FILTER,
    Capability.VIEW_COMMENTS,
)
INTERACTION_CAPABILITIES: tuple[Capability, ...] = (
    Capability.ADD_COMMENTS,
    Capability.EXPORT_IMAGE,
    Capability.EXPORT_DATA,
    Capability.SHARE_VIEW,
    Capability.VIEW_UNDERLYING_DATA,
)
AUTHORING_CAPABILITIES: tuple[Capability, ...] = (
    Capability.WRITE,
    Capability.CREATE_REFRESH_METRICS,
    Capability.OVERWRITE_REFRESH_METRICS,
    Capability.DELETE_REFRESH_METRICS,
)
ADMINISTRATIVE_CAPABILITIES: tuple[Capability, ...] = (
    Capability.CHANGE_HIERARCHY,
    Capability.DELETE,
    Capability.CHANGE_PERMISSIONS,
)

# ── Validity per content type ───────────────────────────
# Refresh metrics exist only on workbooks; views cannot move between
# projects and are edited through their workbook.

_SHARED_CAPABILITIES = frozenset(
    {
        Capability.READ,
        Capability.FILTER,
        Capability.VIEW_COMMENTS,
        Capability.ADD_COMMENTS,
        Capability.EXPORT_IMAGE,
        Capability.EXPORT_DATA,
        Capability.DELETE,
        Capability.CHANGE_PERMISSIONS,
    }
)

CONTENT_TYPE_CAPABILITIES: dict[ContentType, frozenset[Capability]] = {
    ContentType.WORKBOOK: ALL_CAPABILITIES,
    ContentType.DATASOURCE: _SHARED_CAPABILITIES
    | {Capability.WRITE, Capability.CHANGE_HIERARCHY},
    ContentType.PROJECT: _SHARED_CAPABILITIES
    | {Capability.WRITE, Capability.CHANGE_HIERARCHY},
    ContentType.VIEW: _SHARED_CAPABILITIES
    | {Capability.SHARE_VIEW, Capability.VIEW_UNDERLYING_DATA},
    ContentType.FLOW: frozenset(
        {
            Capability.READ,
            Capability.EXPORT_DATA,
            Capability.WRITE,
            Capability.CHANGE_HIERARCHY,
            Capability.DELETE,
            Capability.CHANGE_PERMISSIONS,
        }
    ),
}


def is_valid_for(capability: Capability | str, content_type: ContentType | str) -> bool:
    """Check whether a capability is meaningful on a content type."""
    return Capability(capability) in CONTENT_TYPE_CAPABILITIES[ContentType(content_type)]


def invalid_capabilities(
    content_type: ContentType | str,
    capabilities: Iterable[CapabilityGrant],
) -> list[Capability]:
    """Capabilities from ``capabilities`` that do not apply to ``content_type``, sorted."""
    valid = CONTENT_TYPE_CAPABILITIES[ContentType(content_type)]
    return sorted({c.capability for c in capabilities if c.capability not in valid})


# ── Compatibility matrix ────────────────────────────────


def compatible_capabilities(
    source_type: ContentType | str,
    target_type: ContentType | str,
) -> frozenset[Capability]:
    """Capabilities transferable from ``source_type`` to ``target_type``.

    Same type: every capability. Across types: only capabilities
    meaningful on both sides.

    Example::

        >>> Capability.CHANGE_HIERARCHY in compatible_capabilities("workbook", "project")
        True
        >>> Capability.CHANGE_HIERARCHY in compatible_capabilities("workbook", "view")
        False
    """
    source = ContentType(source_type)
    target = ContentType(target_type)
    if source == target:
        return ALL_CAPABILITIES
    return CONTENT_TYPE_CAPABILITIES[source] & CONTENT_TYPE_CAPABILITIES[target]


def is_compatible(
    capability: Capability | str,
    source_type: ContentType | str,
    target_type: ContentType | str,
) -> bool:
    """Check whether ``capability`` transfers from ``source_type`` to ``target_type``."""
    return Capability(capability) in compatible_capabilities(source_type, target_type)


# ── Templates ───────────────────────────────────────────

VIEWER_TEMPLATE = "Viewer"
AUTHOR_TEMPLATE = "Author"
ADMIN_TEMPLATE = "Admin"

TEMPLATES: dict[str, tuple[Capability, ...]] = {
    VIEWER_TEMPLATE: (
        Capability.READ,
        Capability.FILTER,
        Capability.VIEW_COMMENTS,
        Capability.EXPORT_IMAGE,
    ),
    AUTHOR_TEMPLATE: (
        Capability.READ,
        Capability.FILTER,
        Capability.VIEW_COMMENTS,
        Capability.ADD_COMMENTS,
        Capability.EXPORT_IMAGE,
        Capability.EXPORT_DATA,
        Capability.SHARE_VIEW,
        Capability.WRITE,
    ),
    ADMIN_TEMPLATE: (
        Capability.READ,
        Capability.FILTER,
        Capability.VIEW_COMMENTS,
        Capability.ADD_COMMENTS,
        Capability.EXPORT_IMAGE,
        Capability.EXPORT_DATA,
        Capability.SHARE_VIEW,
        Capability.WRITE,
        Capability.CHANGE_HIERARCHY,
        Capability.DELETE,
        Capability.CHANGE_PERMISSIONS,
    ),
}

TEMPLATE_NAMES: tuple[str, ...] = tuple(TEMPLATES)


def template_capabilities(name: str) -> frozenset[CapabilityGrant]:
    """Capabilities of a named template, all with mode Allow.

    Raises:
        KeyError: ``name`` is not a known template.
    """
    try:
        capabilities = TEMPLATES[name]
    except KeyError:
        raise KeyError(f"Unknown permission template: {name!r}") from None
    return frozenset(CapabilityGrant(c, CapabilityMode.ALLOW) for c in capabilities)


__all__ = [
    "ADMINISTRATIVE_CAPABILITIES",
    "ADMIN_TEMPLATE",
    "ALL_CAPABILITIES",
    "AUTHORING_CAPABILITIES",
    "AUTHOR_TEMPLATE",
    "CONTENT_TYPE_CAPABILITIES",
    "INTERACTION_CAPABILITIES",
    "TEMPLATES",
    "TEMPLATE_NAMES",
    "VIEWER_TEMPLATE",
    "VIEW_CAPABILITIES",
    "compatible_capabilities",
    "invalid_capabilities",
    "is_compatible",
    "is_valid_for",
    "template_capabilities",
]
