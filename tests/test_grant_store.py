"""In-memory grant store: upsert, revoke and lookup semantics."""

import asyncio

import pytest

from conftest import ALICE, BOB, CAROL, EDITORS, P1, B1
from taskrights.core.exceptions import (
    GranteeNotFoundError,
    GrantNotFoundError,
    InvalidRightError,
    ResourceNotFoundError,
)
from taskrights.core.resources import bucket, project
from taskrights.core.rights import Right
from taskrights.database.models.enums import GranteeKind


@pytest.mark.unit
class TestUpsert:

    @pytest.mark.asyncio
    async def test_repeated_grant_updates_instead_of_duplicating(self, store):
        await store.grant_to_user(project(P1), BOB, Right.READ)
        await store.grant_to_user(project(P1), BOB, Right.ADMIN)

        grants = await store.grants_for_resource(project(P1))
        assert len(grants) == 1
        assert grants[0].right is Right.ADMIN
        assert await store.grant_for_user(project(P1), BOB) is Right.ADMIN

    @pytest.mark.asyncio
    async def test_upsert_keeps_insertion_order(self, store):
        await store.grant_to_user(project(P1), BOB, Right.READ)
        await store.grant_to_user(project(P1), CAROL, Right.READ)
        await store.grant_to_user(project(P1), BOB, Right.READ_WRITE)

        grants = await store.grants_for_resource(project(P1))
        assert [g.grantee_id for g in grants] == [BOB, CAROL]

    @pytest.mark.asyncio
    async def test_returns_grant_with_grantee_name(self, store):
        grant = await store.grant_to_team(project(P1), EDITORS, 1)
        assert grant.grantee_kind == GranteeKind.TEAM
        assert grant.grantee_name == "editors"
        assert grant.right is Right.READ_WRITE

    @pytest.mark.asyncio
    async def test_concurrent_grants_leave_one_row(self, store):
        await asyncio.gather(*[
            store.grant_to_user(project(P1), BOB, right)
            for right in (Right.READ, Right.READ_WRITE, Right.ADMIN)
        ])
        assert len(await store.grants_for_resource(project(P1))) == 1


@pytest.mark.unit
class TestGrantValidation:

    @pytest.mark.asyncio
    async def test_invalid_right_rejected_without_mutation(self, store):
        with pytest.raises(InvalidRightError):
            await store.grant_to_user(project(P1), BOB, 99)
        assert await store.grants_for_resource(project(P1)) == []

    @pytest.mark.asyncio
    async def test_invalid_right_does_not_overwrite_existing_grant(self, store):
        await store.grant_to_team(project(P1), EDITORS, Right.READ)
        with pytest.raises(InvalidRightError):
            await store.grant_to_team(project(P1), EDITORS, -1)
        assert await store.grant_for_team(project(P1), EDITORS) is Right.READ

    @pytest.mark.asyncio
    async def test_invalid_right_checked_before_grantee(self, store):
        with pytest.raises(InvalidRightError):
            await store.grant_to_user(project(P1), 999, 5)

    @pytest.mark.asyncio
    async def test_unknown_user(self, store):
        with pytest.raises(GranteeNotFoundError):
            await store.grant_to_user(project(P1), 999, Right.READ)

    @pytest.mark.asyncio
    async def test_unknown_team(self, store):
        with pytest.raises(GranteeNotFoundError):
            await store.grant_to_team(project(P1), 999, Right.READ)

    @pytest.mark.asyncio
    async def test_unknown_resource(self, store):
        with pytest.raises(ResourceNotFoundError):
            await store.grant_to_user(project(12345), BOB, Right.READ)
        assert await store.grants_for_resource(project(12345)) == []


@pytest.mark.unit
class TestRevoke:

    @pytest.mark.asyncio
    async def test_second_revoke_reports_grant_not_found(self, store):
        await store.grant_to_user(project(P1), BOB, Right.READ)
        await store.grant_to_user(project(P1), CAROL, Right.READ)

        await store.revoke_from_user(project(P1), BOB)
        with pytest.raises(GrantNotFoundError) as exc:
            await store.revoke_from_user(project(P1), BOB)

        assert exc.value.status_code == 404
        remaining = await store.grants_for_resource(project(P1))
        assert [g.grantee_id for g in remaining] == [CAROL]

    @pytest.mark.asyncio
    async def test_revoke_team(self, store):
        await store.grant_to_team(project(P1), EDITORS, Right.ADMIN)
        await store.revoke_from_team(project(P1), EDITORS)
        assert await store.grant_for_team(project(P1), EDITORS) is None

    @pytest.mark.asyncio
    async def test_user_and_team_grants_are_separate_keys(self, store):
        store.add_user(EDITORS, "user-with-team-id")
        await store.grant_to_team(project(P1), EDITORS, Right.READ)
        with pytest.raises(GrantNotFoundError):
            await store.revoke_from_user(project(P1), EDITORS)


@pytest.mark.unit
class TestLookups:

    @pytest.mark.asyncio
    async def test_filter_by_grantee_kind(self, store):
        await store.grant_to_user(project(P1), BOB, Right.READ)
        await store.grant_to_team(project(P1), EDITORS, Right.READ)

        users = await store.grants_for_resource(project(P1), GranteeKind.USER)
        teams = await store.grants_for_resource(project(P1), GranteeKind.TEAM)
        assert [g.grantee_id for g in users] == [BOB]
        assert [g.grantee_id for g in teams] == [EDITORS]

    @pytest.mark.asyncio
    async def test_grants_are_per_resource(self, store):
        await store.grant_to_user(project(P1), BOB, Right.READ)
        assert await store.grant_for_user(bucket(B1), BOB) is None

    @pytest.mark.asyncio
    async def test_is_owner(self, store):
        assert await store.is_owner(project(P1), ALICE)
        assert not await store.is_owner(project(P1), BOB)

    @pytest.mark.asyncio
    async def test_load_missing_resource(self, store):
        with pytest.raises(ResourceNotFoundError):
            await store.load_resource(bucket(9999))

    @pytest.mark.asyncio
    async def test_teams_of(self, store):
        assert await store.teams_of(BOB) == frozenset({EDITORS})
        assert await store.teams_of(CAROL) == frozenset()

    def test_parent_must_exist_before_child(self, store):
        with pytest.raises(ResourceNotFoundError):
            store.add_resource(bucket(201), owner_id=ALICE, parent=project(9999))

    @pytest.mark.asyncio
    async def test_removing_resource_drops_its_grants(self, store):
        await store.grant_to_user(bucket(B1), BOB, Right.READ)
        store.remove_resource(bucket(B1))
        assert await store.grants_for_resource(bucket(B1)) == []
