import pytest
import respx
from httpx import Response
from youtrack_client import YouTrackClient
from youtrack_client.errors import ForbiddenError


@pytest.fixture
def client():
    return YouTrackClient(base_url="https://yt.example.com", token="perm:mock-token")


@pytest.mark.asyncio
@respx.mock
async def test_list_projects_empty_array_is_empty_sequence(client):
    respx.get("https://yt.example.com/api/admin/projects").mock(
        return_value=Response(200, json=[])
    )

    async with client:
        projects = await client.projects.list_projects().to_list()

    assert projects == []


@pytest.mark.asyncio
@respx.mock
async def test_list_projects_parses_and_passes_fields(client, load_fixture):
    route = respx.get("https://yt.example.com/api/admin/projects").mock(
        return_value=Response(200, json=load_fixture("projects.json"))
    )

    async with client:
        projects = [p async for p in client.projects.list_projects()]

    assert [p.short_name for p in projects] == ["DEMO", "MYD", "OLD"]
    assert projects[2].archived is True
    assert projects[1].leader.login == "jdoe"

    params = route.calls[0].request.url.params
    assert "shortName" in params["fields"]
    assert params["$skip"] == "0"
    assert "query" not in params


@pytest.mark.asyncio
@respx.mock
async def test_list_projects_can_exclude_archived(client):
    route = respx.get("https://yt.example.com/api/admin/projects").mock(
        return_value=Response(200, json=[])
    )

    async with client:
        await client.projects.list_projects(include_archived=False).to_list()

    assert route.calls[0].request.url.params["query"] == "archived: false"


@pytest.mark.asyncio
@respx.mock
async def test_list_projects_limit(client, load_fixture):
    route = respx.get("https://yt.example.com/api/admin/projects").mock(
        return_value=Response(200, json=load_fixture("projects.json")[:2])
    )

    async with client:
        projects = await client.projects.list_projects(limit=2).to_list()

    assert len(projects) == 2
    assert route.call_count == 1
    assert route.calls[0].request.url.params["$top"] == "2"


@pytest.mark.asyncio
@respx.mock
async def test_get_project(client, load_fixture):
    respx.get("https://yt.example.com/api/admin/projects/0-2").mock(
        return_value=Response(200, json=load_fixture("projects.json")[1])
    )

    async with client:
        project = await client.projects.get_project("0-2")

    assert project.name == "My Desk"


@pytest.mark.asyncio
@respx.mock
async def test_get_project_custom_fields(client, load_fixture):
    respx.get("https://yt.example.com/api/admin/projects/0-2/customFields").mock(
        return_value=Response(200, json=load_fixture("project_custom_fields.json"))
    )

    async with client:
        fields = await client.projects.get_project_custom_fields("0-2")

    assert [f.name for f in fields] == ["Priority", "State", "Assignee"]
    assert fields[0].field_type == "enum[1]"
    assert fields[0].can_be_empty is False
    assert fields[2].empty_field_text == "Unassigned"


@pytest.mark.asyncio
@respx.mock
async def test_project_without_custom_fields_returns_empty_list(client):
    respx.get("https://yt.example.com/api/admin/projects/0-9/customFields").mock(
        return_value=Response(200, json=[])
    )

    async with client:
        assert await client.projects.get_project_custom_fields("0-9") == []


@pytest.mark.asyncio
@respx.mock
async def test_custom_fields_failure_is_an_error_not_empty(client):
    respx.get("https://yt.example.com/api/admin/projects/0-9/customFields").mock(
        return_value=Response(403, json={"error": "Forbidden"})
    )

    async with client:
        with pytest.raises(ForbiddenError):
            await client.projects.get_project_custom_fields("0-9")


@pytest.mark.asyncio
@respx.mock
async def test_get_custom_field_values_matches_name_loosely(client, load_fixture):
    respx.get("https://yt.example.com/api/admin/projects/0-2/customFields").mock(
        return_value=Response(200, json=load_fixture("project_custom_fields.json"))
    )

    async with client:
        values = await client.projects.get_custom_field_values("0-2", "  state ")
        assignee_values = await client.projects.get_custom_field_values("0-2", "Assignee")

    assert [v.name for v in values] == ["Open", "In Progress", "Done"]
    assert assignee_values == []


@pytest.mark.asyncio
@respx.mock
async def test_get_custom_field_values_unknown_field(client, load_fixture):
    respx.get("https://yt.example.com/api/admin/projects/0-2/customFields").mock(
        return_value=Response(200, json=load_fixture("project_custom_fields.json"))
    )

    async with client:
        with pytest.raises(ValueError) as exc:
            await client.projects.get_custom_field_values("0-2", "Severity")

    assert "Available: Assignee, Priority, State" in str(exc.value)
