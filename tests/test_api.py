"""Tests for the cached ACMOJ API client."""

import httpx
import pytest

from acmoj_client.api import AcmojClient, ResourceTTLs
from acmoj_client.cache import CacheService
from acmoj_client.errors import ClientError
from acmoj_client.executor import RequestExecutor

from conftest import FakeClock, Router, make_client

API = "/OnlineJudge/api/v1"


@pytest.mark.asyncio
async def test_problem_list_is_cached_per_selector() -> None:
    router = Router()
    router.add("GET", f"{API}/problem/", {"problems": [{"id": 1}], "next": None})
    client = make_client(router)

    await client.get_problems()
    await client.get_problems()
    await client.get_problems(keyword="graph")

    assert router.calls("GET", f"{API}/problem/") == 2
    assert sorted(client.cache.keys()) == ["problems:::", "problems::graph:"]
    assert router.requests[1].url.params["keyword"] == "graph"
    assert "cursor" not in router.requests[1].url.params


@pytest.mark.asyncio
async def test_submission_list_key_and_params() -> None:
    router = Router()
    router.add("GET", f"{API}/submission/", {"submissions": [], "next": None})
    client = make_client(router)

    await client.get_submissions(cursor="abc", username="alice", problem_id=1000, status="accepted")

    assert client.cache.keys() == ["submissions:abc:alice:1000:accepted:"]
    params = router.requests[0].url.params
    assert params["problem_id"] == "1000"
    assert params["status"] == "accepted"
    assert "lang" not in params


@pytest.mark.asyncio
async def test_resource_ttls_apply() -> None:
    router = Router()
    router.add("GET", f"{API}/submission/5", {"id": 5, "status": "judging"})
    router.add("GET", f"{API}/problem/1", {"id": 1, "title": "A+B"})
    clock = FakeClock()
    client = make_client(router, clock=clock)

    await client.get_submission_details(5)
    await client.get_problem_details(1)
    clock.advance_minutes(ResourceTTLs().submission + 1)

    assert client.cache.get("submission:5") is None
    assert client.cache.get("problem:1") == {"id": 1, "title": "A+B"}


@pytest.mark.asyncio
async def test_stale_submission_served_when_server_down() -> None:
    router = Router()
    path = f"{API}/submission/5"
    router.add("GET", path, {"id": 5, "status": "accepted"}, httpx.Response(500))
    clock = FakeClock()
    client = make_client(router, clock=clock, max_attempts=2)

    await client.get_submission_details(5)
    clock.advance_minutes(10)
    detail = await client.get_submission_details(5)

    assert detail["status"] == "accepted"
    assert router.calls("GET", path) == 3


@pytest.mark.asyncio
async def test_client_error_not_masked_without_cache() -> None:
    router = Router()
    router.add("GET", f"{API}/problemset/9", httpx.Response(403, json={"message": "forbidden"}))
    client = make_client(router)

    with pytest.raises(ClientError):
        await client.get_problemset_details(9)


@pytest.mark.asyncio
async def test_submit_invalidates_submission_lists_only() -> None:
    router = Router()
    router.add("POST", f"{API}/problem/1000/submit", {"id": 77})
    client = make_client(router)
    client.cache.set("submissions:::::", {"submissions": []})
    client.cache.set("submission:5", {"id": 5})
    client.cache.set("problem:1000", {"id": 1000})
    refreshed: list[str] = []
    client.cache.on_invalidate(refreshed.append)

    result = await client.submit_code(1000, "cpp", "int main(){}", is_public=True)

    assert result == {"id": 77}
    assert sorted(client.cache.keys()) == ["problem:1000", "submission:5"]
    assert refreshed == ["submissions:"]
    assert b"public=true" in router.requests[0].content


@pytest.mark.asyncio
async def test_failed_submit_keeps_cache() -> None:
    router = Router()
    router.add("POST", f"{API}/problem/1000/submit", httpx.Response(400, json={"message": "bad lang"}))
    client = make_client(router)
    client.cache.set("submissions:::::", {"submissions": []})

    with pytest.raises(ClientError):
        await client.submit_code(1000, "cobol", "")
    assert "submissions:::::" in client.cache


@pytest.mark.asyncio
async def test_abort_invalidates_list_and_detail() -> None:
    router = Router()
    router.add("POST", f"{API}/submission/5/abort", httpx.Response(204))
    client = make_client(router)
    client.cache.set("submissions:::::", {"submissions": []})
    client.cache.set("submission:5", {"id": 5})
    client.cache.set("submission:6", {"id": 6})

    await client.abort_submission(5)

    assert client.cache.keys() == ["submission:6"]


@pytest.mark.asyncio
async def test_submission_code_resolves_site_relative_url() -> None:
    router = Router()
    router.add("GET", "/OnlineJudge/code/5", httpx.Response(200, text="print(1)"))
    client = make_client(router)

    code = await client.get_submission_code("/code/5")
    again = await client.get_submission_code("/code/5")

    assert code == again == "print(1)"
    assert str(router.requests[0].url) == "https://oj.test/OnlineJudge/code/5"
    assert router.calls("GET", "/OnlineJudge/code/5") == 1


@pytest.mark.asyncio
async def test_profile_and_problemsets() -> None:
    router = Router()
    router.add("GET", f"{API}/user/profile", {"username": "alice", "friendly_name": "Alice"})
    router.add("GET", f"{API}/user/problemsets", {"problemsets": [{"id": 3, "name": "Week 1"}]})
    client = make_client(router)

    profile = await client.get_user_profile()
    sets = await client.get_user_problemsets()

    assert profile["username"] == "alice"
    assert sets["problemsets"][0]["name"] == "Week 1"
    assert sorted(client.cache.keys()) == ["user:problemsets", "user:profile"]

    client.clear_cache()
    assert client.cache.keys() == []


@pytest.mark.asyncio
async def test_expire_submission_cache() -> None:
    client = make_client(Router())
    client.cache.set("submission:5", {"id": 5})
    client.expire_submission_cache(5)
    assert "submission:5" not in client.cache


@pytest.mark.asyncio
async def test_selectors_with_separator_do_not_share_cache_entry() -> None:
    router = Router()
    router.add(
        "GET",
        f"{API}/problem/",
        {"problems": [{"id": 1}], "next": None},
        {"problems": [{"id": 2}], "next": None},
    )
    client = make_client(router)

    first = await client.get_problems(cursor="c:k")
    second = await client.get_problems(cursor="c", keyword="k:")

    assert router.calls("GET", f"{API}/problem/") == 2
    assert first["problems"] == [{"id": 1}]
    assert second["problems"] == [{"id": 2}]
    assert len(client.cache.keys()) == 2
    assert all(k.startswith("problems:") for k in client.cache.keys())


@pytest.mark.asyncio
async def test_zero_filter_is_sent() -> None:
    router = Router()
    router.add("GET", f"{API}/submission/", {"submissions": [], "next": None})
    client = make_client(router)

    await client.get_submissions(problem_id=0, status="")

    params = router.requests[0].url.params
    assert params["problem_id"] == "0"
    assert "status" not in params


@pytest.mark.asyncio
async def test_site_url_strips_only_trailing_api_suffix() -> None:
    executor = RequestExecutor("https://mirror.test/api/v1/OnlineJudge/api/v1")
    try:
        client = AcmojClient(executor, CacheService())
        assert client.site_url == "https://mirror.test/api/v1/OnlineJudge"
    finally:
        await executor.aclose()
