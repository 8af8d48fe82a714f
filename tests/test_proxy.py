import pytest
import requests
from fastapi.testclient import TestClient

from lens_profile.lens import queries
from lens_profile.proxy.app import ProxySettings, create_app

from conftest import fake_response

SETTINGS = ProxySettings(
    api_url="https://api.example.com/graphql",
    default_local_name="danielwonder",
    default_namespace="0xNs",
)


@pytest.fixture
def client(session):
    return TestClient(create_app(SETTINGS, session=session))


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_accounts_uses_default_account(client, session):
    payload = {"data": {"account": {"address": "0xA"}}}
    session.post.return_value = fake_response(200, payload)

    r = client.post("/api/proxy/accounts", json={"query": "ignored"})

    assert r.status_code == 200
    assert r.json() == payload
    args, kwargs = session.post.call_args
    assert args[0] == "https://api.example.com/graphql"
    assert kwargs["json"]["query"] == queries.ACCOUNT_QUERY
    assert kwargs["json"]["variables"] == queries.account_variables("danielwonder", "0xNs")
    assert kwargs["headers"]["User-Agent"] == "lens-profile-app"


def test_accounts_forwards_requested_account(client, session):
    session.post.return_value = fake_response(200, {"data": {"account": {"address": "0xB"}}})
    variables = queries.account_variables("bob", "0xNs")

    client.post("/api/proxy/accounts", json={"query": "", "variables": variables})

    assert session.post.call_args.kwargs["json"]["variables"] == variables


def test_accounts_without_any_account(session):
    client = TestClient(create_app(ProxySettings(api_url="https://api.example.com/graphql"), session=session))
    r = client.post("/api/proxy/accounts", json={})
    assert r.status_code == 400
    session.post.assert_not_called()


def test_account_not_found(client, session):
    session.post.return_value = fake_response(200, {"data": {"account": None}})
    r = client.post("/api/proxy/accounts", json={})
    assert r.status_code == 502
    assert "Invalid accounts response" in r.json()["error"]


def test_stats_uses_server_side_query(client, session):
    session.post.return_value = fake_response(200, {"data": {"accountStats": {"feedStats": {"posts": 1}}}})

    r = client.post("/api/proxy/stats", json={"query": "query { evil }", "variables": {"address": "0xA"}})

    assert r.status_code == 200
    sent = session.post.call_args.kwargs["json"]
    assert sent == {"query": queries.STATS_QUERY, "variables": {"address": "0xA"}}


def test_stats_requires_address(client, session):
    assert client.post("/api/proxy/stats", json={"variables": {}}).status_code == 400
    session.post.assert_not_called()


def test_posts_forwards_query_and_variables(client, session, posts_response):
    session.post.return_value = fake_response(200, posts_response)

    r = client.post("/api/proxy/posts", json={"query": queries.POSTS_QUERY, "variables": {"authors": ["0xA"]}})

    assert r.status_code == 200
    assert r.json() == posts_response
    assert session.post.call_args.kwargs["json"]["variables"] == {"authors": ["0xA"]}


def test_posts_requires_query(client):
    assert client.post("/api/proxy/posts", json={"variables": {}}).status_code == 400


def test_transport_failure(client, session):
    session.post.side_effect = requests.ConnectionError("refused")
    r = client.post("/api/proxy/posts", json={"query": "{ posts }"})
    assert r.status_code == 502
    assert r.json() == {"error": "Failed to connect to Lens API", "details": "refused"}


def test_graphql_errors(client, session):
    session.post.return_value = fake_response(200, {"errors": [{"message": "Unknown field"}]})
    r = client.post("/api/proxy/posts", json={"query": "{ posts }"})
    assert r.status_code == 502
    assert r.json()["error"] == "Lens API returned errors: Unknown field"


def test_upstream_status_is_relayed(client, session):
    session.post.return_value = fake_response(429, {"errors": [{"message": "Too many requests"}]})
    r = client.post("/api/proxy/stats", json={"variables": {"address": "0xA"}})
    assert r.status_code == 429
    assert r.json()["error"] == "Too many requests"


def test_non_json_upstream(client, session):
    session.post.return_value = fake_response(200, text="<html>oops</html>")
    r = client.post("/api/proxy/posts", json={"query": "{ posts }"})
    assert r.status_code == 502


def test_cors_preflight(client):
    r = client.options(
        "/api/proxy/posts",
        headers={"Origin": "https://example.org", "Access-Control-Request-Method": "POST"},
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "*"


def test_serves_rendered_site(tmp_path, session):
    (tmp_path / "index.html").write_text("<h1>profile</h1>", encoding="utf-8")
    client = TestClient(create_app(ProxySettings(site_dir=str(tmp_path)), session=session))
    r = client.get("/")
    assert r.status_code == 200
    assert "profile" in r.text
    # API routes still win over the static mount
    assert client.get("/health").json() == {"status": "ok"}
