from typing import Dict, Optional

from taskrights.core.exceptions import BackingStoreError
from taskrights.core.resources import ResourceRef
from taskrights.database.models.enums import NESTING, ResourceType


class HierarchyResolver:
    """Finds the parent a resource delegates to. No authorization logic here."""

    def __init__(self, loader, nesting: Optional[Dict[ResourceType, ResourceType]] = None):
        self.loader = loader
        self.nesting = NESTING if nesting is None else nesting

    def parent_type(self, resource_type: ResourceType) -> Optional[ResourceType]:
        return self.nesting.get(resource_type)

    async def parent_of(self, resource: ResourceRef) -> Optional[ResourceRef]:
        expected = self.parent_type(resource.type)
        if expected is None:
            return None

        info = await self.loader.load_resource(resource)
        if info.parent is None:
            return None

        if info.parent.type != expected:
            raise BackingStoreError(
                f"{resource} has parent {info.parent}, expected a {expected.value}"
            )
        return info.parent
