import logging

import pytest

from lens_profile.lens.errors import MalformedResponse, UpstreamError, UpstreamUnreachable
from lens_profile.pipeline import load_profile_page, render_feed

ACCOUNT = {"address": "0xAccount", "username": {"value": "lens/alice"}, "metadata": {"name": "Alice"}}
STATS = {"feedStats": {"posts": 4}, "graphFollowStats": {"followers": 10, "following": 2}}


class FakeClient:
    """Records call order; each fetch returns its canned value or raises it."""

    def __init__(self, account=ACCOUNT, stats=STATS, posts=None):
        self.account, self.stats, self.posts = account, stats, posts
        self.calls = []

    def _answer(self, value):
        if isinstance(value, Exception):
            raise value
        return value

    def fetch_account(self):
        self.calls.append("account")
        return self._answer(self.account)

    def fetch_stats(self, address):
        self.calls.append(("stats", address))
        return self._answer(self.stats)

    def fetch_posts(self, address=None):
        self.calls.append(("posts", address))
        return self._answer(self.posts)


def test_render_feed_is_ordered_and_drops_malformed(posts_response, now):
    cards = render_feed(posts_response, now=now)
    assert [c.id for c in cards] == ["post-text", "repost-1", "post-article", "post-image"]
    assert cards[1].repost


def test_render_feed_survives_bad_article_blocks_and_empty_metadata(now):
    article = {"__typename": "ArticleMetadata", "title": "T", "attributes": [
        {"key": "coverUrl", "value": "https://x/c.png"},
        {"key": "contentJson", "value": '[{"type": "img", "url": 5}, {"type": "p", "children": [{"text": "ok"}]}]'},
    ]}
    response = {"posts": {"items": [
        {"id": "a", "timestamp": "2026-10-19T11:00:00Z", "metadata": article},
        {"id": "b", "timestamp": "2026-10-19T10:00:00Z", "metadata": {}},
    ]}}
    cards = render_feed(response, now=now)
    assert [c.id for c in cards] == ["a", "b"]
    assert [type(b).__name__ for b in cards[0].content.body] == ["Paragraph"]
    assert cards[1].content.display_text == "No content available"


def test_render_feed_rejects_empty_item_list(now):
    with pytest.raises(MalformedResponse):
        render_feed({"data": {"posts": {"items": []}}}, now=now)


def test_happy_path_runs_stages_in_order(config, posts_response, now):
    client = FakeClient(posts=posts_response["data"])
    page = load_profile_page(client, config, now=now)

    assert client.calls == ["account", ("stats", "0xAccount"), ("posts", "0xAlice")]
    assert page.errors == ()
    assert page.profile.display_name == "Alice"
    assert (page.profile.followers, page.profile.following, page.profile.posts) == (10, 2, 4)
    assert len(page.cards) == 4


def test_account_failure_aborts_before_posts(config, now, caplog):
    client = FakeClient(account=UpstreamUnreachable("down"))
    with caplog.at_level(logging.INFO, logger="lens_profile"):
        with pytest.raises(UpstreamUnreachable):
            load_profile_page(client, config, now=now)
    assert client.calls == ["account"]
    # loading state is cleared even on failure
    assert "Finished loading alice.lens" in caplog.text


def test_stats_failure_keeps_header_and_skips_posts(config, now):
    client = FakeClient(stats=UpstreamError("HTTP 500 from stats: boom", status=500))
    page = load_profile_page(client, config, now=now)

    assert client.calls == ["account", ("stats", "0xAccount")]
    assert page.profile.display_name == "Alice"
    assert (page.profile.followers, page.profile.posts) == (0, 0)
    assert page.cards == ()
    assert page.errors == ("Error loading profile stats: HTTP 500 from stats: boom",)


def test_posts_failure_keeps_header_and_stats(config, now):
    client = FakeClient(posts={"posts": {"items": []}})
    page = load_profile_page(client, config, now=now)

    assert page.profile.followers == 10
    assert page.cards == ()
    assert page.errors == ("Error loading posts: No posts found",)


def test_account_without_address_uses_configured_address(config, posts_response, now):
    client = FakeClient(account={"username": {"value": "lens/alice"}}, posts=posts_response)
    load_profile_page(client, config, now=now)
    assert ("stats", "0xAlice") in client.calls
