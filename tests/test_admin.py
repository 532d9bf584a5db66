import json

import pytest
import respx
from httpx import Response
from youtrack_client import YouTrackClient
from youtrack_client.errors import BadRequestError


@pytest.fixture
def client():
    return YouTrackClient(base_url="https://yt.example.com", token="perm:mock-token")


@pytest.mark.asyncio
@respx.mock
async def test_get_current_user(client, load_fixture):
    respx.get("https://yt.example.com/api/users/me").mock(
        return_value=Response(200, json=load_fixture("user_me.json"))
    )

    async with client:
        me = await client.admin.get_current_user()

    assert me.login == "jdoe"
    assert me.display_name == "Jane Doe"


@pytest.mark.asyncio
@respx.mock
async def test_list_users_with_query(client):
    route = respx.get("https://yt.example.com/api/users").mock(
        return_value=Response(200, json=[{"id": "1-5", "login": "jdoe"}])
    )

    async with client:
        users = await client.admin.list_users(" jdoe ").to_list()

    assert [u.login for u in users] == ["jdoe"]
    assert route.calls[0].request.url.params["query"] == "jdoe"


@pytest.mark.asyncio
@respx.mock
async def test_list_groups_and_custom_fields(client):
    respx.get("https://yt.example.com/api/groups").mock(
        return_value=Response(
            200, json=[{"id": "3-0", "name": "All Users", "usersCount": 12}]
        )
    )
    respx.get("https://yt.example.com/api/admin/customFieldSettings/customFields").mock(
        return_value=Response(
            200,
            json=[
                {"id": "5-1", "name": "Priority", "fieldType": {"id": "enum[1]"}},
                {"id": "5-2", "name": "State", "fieldType": {"id": "state[1]"}},
            ],
        )
    )

    async with client:
        groups = await client.admin.list_groups().to_list()
        fields = await client.admin.list_custom_fields().to_list()

    assert groups[0].users_count == 12
    assert [f.field_type.id for f in fields] == ["enum[1]", "state[1]"]


@pytest.mark.asyncio
@respx.mock
async def test_create_project_payload(client):
    route = respx.post("https://yt.example.com/api/admin/projects").mock(
        return_value=Response(200, json={"id": "0-7", "name": "New", "shortName": "NEW"})
    )

    async with client:
        project = await client.admin.create_project(
            name="New", short_name="NEW", leader_id="1-5"
        )

    assert project.short_name == "NEW"
    assert json.loads(route.calls[0].request.content) == {
        "name": "New",
        "shortName": "NEW",
        "leader": {"id": "1-5"},
    }


@pytest.mark.asyncio
@respx.mock
async def test_create_project_duplicate_short_name(client):
    respx.post("https://yt.example.com/api/admin/projects").mock(
        return_value=Response(
            400,
            json={
                "error": "bad_request",
                "error_description": "Project with short name NEW already exists",
            },
        )
    )

    async with client:
        with pytest.raises(BadRequestError) as exc:
            await client.admin.create_project(name="New", short_name="NEW", leader_id="1-5")

    assert "already exists" in exc.value.message
    assert exc.value.message.startswith("admin.create_project failed:")


@pytest.mark.asyncio
@respx.mock
async def test_update_archive_and_delete_project(client):
    route = respx.post("https://yt.example.com/api/admin/projects/0-7").mock(
        return_value=Response(200, json={"id": "0-7", "archived": True})
    )
    delete = respx.delete("https://yt.example.com/api/admin/projects/0-7").mock(
        return_value=Response(200)
    )

    async with client:
        await client.admin.update_project("0-7", description="Updated")
        archived = await client.admin.archive_project("0-7")
        await client.admin.delete_project("0-7")
        with pytest.raises(ValueError):
            await client.admin.update_project("0-7")

    bodies = [json.loads(c.request.content) for c in route.calls]
    assert bodies == [{"description": "Updated"}, {"archived": True}]
    assert archived.archived is True
    assert delete.call_count == 1


@pytest.mark.asyncio
@respx.mock
async def test_group_membership(client):
    members = respx.get("https://yt.example.com/api/groups/3-1/users").mock(
        return_value=Response(200, json=[{"id": "1-1", "login": "jdoe"}])
    )
    add = respx.post("https://yt.example.com/api/groups/3-1/users").mock(
        return_value=Response(200, json={"id": "1-2"})
    )
    remove = respx.delete("https://yt.example.com/api/groups/3-1/users/1-2").mock(
        return_value=Response(200)
    )

    async with client:
        users = await client.admin.list_group_members("3-1").to_list()
        assert await client.admin.add_user_to_group("3-1", "1-2") is None
        assert await client.admin.remove_user_from_group("3-1", "1-2") is None

    assert [u.login for u in users] == ["jdoe"]
    assert "fields" in members.calls[0].request.url.params
    assert json.loads(add.calls[0].request.content) == {"id": "1-2"}
    assert remove.call_count == 1


@pytest.mark.asyncio
@respx.mock
async def test_add_user_to_group_rejected(client):
    respx.post("https://yt.example.com/api/groups/3-1/users").mock(
        return_value=Response(400, json={"error_description": "User is already a member"})
    )

    async with client:
        with pytest.raises(BadRequestError) as exc:
            await client.admin.add_user_to_group("3-1", "1-2")

    assert exc.value.message == "admin.add_user_to_group failed: User is already a member"
