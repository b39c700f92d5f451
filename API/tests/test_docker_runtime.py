import pytest
from unittest.mock import MagicMock

from docker.errors import APIError, NotFound
from requests.exceptions import ConnectionError as RequestsConnectionError

from container_health.core.errors import ContainerNotFoundError, EngineUnavailableError
from container_health.services.docker_runtime import DockerSDKRuntime


def make_runtime():
    client = MagicMock()
    return DockerSDKRuntime(client=client), client


@pytest.mark.asyncio
async def test_list_containers_includes_stopped():
    runtime, client = make_runtime()
    client.api.containers.return_value = [{"Id": "abc"}]

    containers = await runtime.list_containers(include_stopped=True)

    assert containers == [{"Id": "abc"}]
    client.api.containers.assert_called_once_with(all=True)


@pytest.mark.asyncio
async def test_logs_requests_bounded_tail_without_follow():
    runtime, client = make_runtime()
    client.api.logs.return_value = b"line\n"

    raw = await runtime.logs("abc", tail=20)

    assert raw == b"line\n"
    client.api.logs.assert_called_once_with(
        "abc", stdout=True, stderr=True, stream=False, follow=False, tail=20
    )


@pytest.mark.asyncio
async def test_stats_is_a_single_snapshot():
    runtime, client = make_runtime()
    client.api.stats.return_value = {"cpu_stats": {}}

    await runtime.stats("abc")

    client.api.stats.assert_called_once_with("abc", stream=False)


@pytest.mark.asyncio
async def test_unknown_container_raises_not_found():
    runtime, client = make_runtime()
    client.api.inspect_container.side_effect = NotFound("No such container: abc")

    with pytest.raises(ContainerNotFoundError) as exc_info:
        await runtime.inspect_container("abc")

    assert exc_info.value.container_id == "abc"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "failure",
    [
        APIError("500 Server Error"),
        RequestsConnectionError("Connection refused"),
    ],
)
async def test_engine_failures_become_unavailable(failure):
    runtime, client = make_runtime()
    client.api.containers.side_effect = failure

    with pytest.raises(EngineUnavailableError):
        await runtime.list_containers()


@pytest.mark.asyncio
async def test_missing_image_is_not_a_container_not_found():
    runtime, client = make_runtime()
    client.api.inspect_image.side_effect = NotFound("No such image")

    with pytest.raises(EngineUnavailableError):
        await runtime.inspect_image("ghost:latest")


def test_close_closes_client():
    runtime, client = make_runtime()

    runtime.close()

    client.close.assert_called_once()
