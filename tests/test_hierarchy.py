import pytest

from conftest import ALICE, P1, B1, T1, F1
from taskrights.core.exceptions import BackingStoreError, ResourceNotFoundError
from taskrights.core.resources import ResourceRef, bucket, project, saved_filter, task
from taskrights.core.services.hierarchy import HierarchyResolver
from taskrights.database.models.enums import ResourceType


@pytest.mark.unit
class TestHierarchyResolver:

    @pytest.mark.asyncio
    async def test_bucket_and_task_nest_under_project(self, store):
        resolver = HierarchyResolver(store)
        assert await resolver.parent_of(bucket(B1)) == project(P1)
        assert await resolver.parent_of(task(T1)) == project(P1)

    @pytest.mark.asyncio
    async def test_top_level_types_have_no_parent(self, store):
        resolver = HierarchyResolver(store)
        assert await resolver.parent_of(project(P1)) is None
        assert await resolver.parent_of(saved_filter(F1)) is None

    def test_static_nesting(self, store):
        resolver = HierarchyResolver(store)
        assert resolver.parent_type(ResourceType.BUCKET) == ResourceType.PROJECT
        assert resolver.parent_type(ResourceType.PROJECT_TEAM) == ResourceType.PROJECT
        assert resolver.parent_type(ResourceType.PROJECT) is None

    @pytest.mark.asyncio
    async def test_missing_child_raises(self, store):
        with pytest.raises(ResourceNotFoundError):
            await HierarchyResolver(store).parent_of(bucket(9999))

    @pytest.mark.asyncio
    async def test_parent_of_wrong_type_is_a_store_inconsistency(self, store):
        store.add_resource(bucket(201), owner_id=ALICE, parent=saved_filter(F1))
        with pytest.raises(BackingStoreError):
            await HierarchyResolver(store).parent_of(bucket(201))

    @pytest.mark.asyncio
    async def test_custom_nesting_walks_any_depth(self, store):
        nesting = {
            ResourceType.TASK: ResourceType.BUCKET,
            ResourceType.BUCKET: ResourceType.PROJECT,
        }
        store.add_resource(task(301), owner_id=ALICE, parent=bucket(B1))
        resolver = HierarchyResolver(store, nesting)

        chain = []
        current = ResourceRef(ResourceType.TASK, 301)
        while current is not None:
            chain.append(current)
            current = await resolver.parent_of(current)

        assert chain == [task(301), bucket(B1), project(P1)]
