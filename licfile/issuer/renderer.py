"""
Minimal JSON:API renderer for licenses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from licfile.common.models import ResourceDocument, ResourceObject

if TYPE_CHECKING:
    from licfile.common.entities import License, Related

LICENSE_TYPE = "licenses"

DEFAULT_ALLOWED_INCLUDES = frozenset(
    {"entitlements", "group", "owner", "policy", "product", "user"}
)


def _as_list(related: Related) -> list[ResourceObject]:
    if related is None:
        return []
    if isinstance(related, list):
        return related
    return [related]


def _linkage(related: Related) -> dict[str, Any]:
    if related is None:
        return {"data": None}
    if isinstance(related, list):
        return {"data": [r.identifier for r in related]}
    return {"data": related.identifier}


class LicenseRenderer:
    """Render a license and the relationships requested for inclusion."""

    def __init__(self, allowed_includes: frozenset[str] | None = None):
        self.allowed_includes = (
            DEFAULT_ALLOWED_INCLUDES if allowed_includes is None else allowed_includes
        )

    def render(self, lic: License, include: list[str]) -> ResourceDocument:
        data = ResourceObject(
            type=LICENSE_TYPE,
            id=lic.id,
            attributes=dict(lic.attributes),
            relationships={
                name: _linkage(related) for name, related in lic.relationships.items()
            },
        )

        included: list[ResourceObject] = []
        seen: set[tuple[str, str]] = set()
        for name in include:
            for resource in _as_list(lic.relationships.get(name)):
                key = (resource.type, resource.id)
                if key not in seen:
                    seen.add(key)
                    included.append(resource)

        return ResourceDocument(data=data, included=included)
