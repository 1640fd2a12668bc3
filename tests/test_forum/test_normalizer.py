import itertools
import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from petpal.forum.exceptions import MalformedPayloadError
from petpal.forum.models import Post, PostOrigin
from petpal.forum.normalizer import (
    has_image,
    normalize_listing,
    normalize_post,
    normalize_subreddit,
)

FIXTURE = json.loads(
    (Path(__file__).parent.parent / "fixtures" / "reddit_posts.json").read_text()
)

NOW = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

_FULL_ITEM = {
    "title": "Dog ate a sock",
    "selftext": "Should I call the vet?",
    "created_utc": 1700000000,
    "author": "bob",
    "subreddit": "dogs",
    "url": "https://i.redd.it/sock.png",
}

_DEFAULTS = {
    "title": "",
    "selftext": "",
    "created_utc": NOW,
    "author": "Unknown",
    "subreddit": "pets",
    "url": False,
}


def _field(post: Post, name: str):
    return {
        "title": post.title,
        "selftext": post.body,
        "created_utc": post.created_at,
        "author": post.author,
        "subreddit": post.source_group,
        "url": post.has_image,
    }[name]


@pytest.mark.parametrize(
    "missing",
    [
        combo
        for size in range(len(_FULL_ITEM) + 1)
        for combo in itertools.combinations(sorted(_FULL_ITEM), size)
    ],
)
def test_every_missing_field_falls_back_to_its_default(missing):
    raw = {k: v for k, v in _FULL_ITEM.items() if k not in missing}
    post = normalize_post(raw, "pets", now=NOW)

    for name in _FULL_ITEM:
        if name in missing:
            assert _field(post, name) == _DEFAULTS[name], name
    assert post.origin is PostOrigin.REDDIT


def test_full_item_maps_every_field():
    post = normalize_post(_FULL_ITEM, "pets", now=NOW)

    assert post.title == "Dog ate a sock"
    assert post.body == "Should I call the vet?"
    assert post.created_at == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
    assert post.author == "bob"
    assert post.source_group == "dogs"
    assert post.has_image is True


def test_null_and_empty_values_are_treated_as_missing():
    raw = {"title": None, "selftext": "", "created_utc": 0, "author": "", "subreddit": None, "url": None}
    post = normalize_post(raw, "cats", now=NOW)

    assert post == Post(
        title="",
        body="",
        created_at=NOW,
        author="Unknown",
        source_group="cats",
        has_image=False,
        origin=PostOrigin.REDDIT,
    )


def test_wrongly_typed_values_fall_back_to_defaults():
    raw = {"title": 42, "selftext": ["x"], "created_utc": "yesterday", "author": {"name": "x"}, "url": 7}
    post = normalize_post(raw, "pets", now=NOW)

    assert post.title == ""
    assert post.body == ""
    assert post.created_at == NOW
    assert post.author == "Unknown"
    assert post.has_image is False


def test_boolean_timestamp_is_not_an_epoch():
    post = normalize_post({"created_utc": True}, "pets", now=NOW)
    assert post.created_at == NOW


def test_out_of_range_timestamp_falls_back_to_now():
    post = normalize_post({"created_utc": 1e20}, "pets", now=NOW)
    assert post.created_at == NOW


def test_negative_timestamp_is_a_pre_epoch_time():
    post = normalize_post({"created_utc": -86400}, "pets", now=NOW)
    assert post.created_at == datetime(1969, 12, 31, tzinfo=timezone.utc)


def test_non_mapping_item_gives_all_default_post():
    post = normalize_post("garbage", "pets", now=NOW)
    assert post.title == ""
    assert post.author == "Unknown"
    assert post.source_group == "pets"


def test_default_now_is_timezone_aware():
    post = normalize_post({}, "pets")
    assert post.created_at.tzinfo is not None


@pytest.mark.parametrize(
    "url, expected",
    [
        ("http://x/img.png", True),
        ("https://i.redd.it/a.jpg", True),
        ("https://i.imgur.com/b.gif", True),
        ("https://i.redd.it/a.jpeg", False),
        ("https://i.redd.it/a.JPG", False),
        ("https://www.reddit.com/r/pets/comments/1/", False),
        ("", False),
        (None, False),
    ],
)
def test_has_image(url, expected):
    assert has_image(url) is expected


def test_listing_preserves_upstream_order():
    posts = normalize_listing(FIXTURE, "pets", now=NOW)

    assert [p.title for p in posts] == [
        "My cat keeps knocking glasses off the table",
        "Adopted a rescue greyhound today",
        "Best litter for a small apartment?",
    ]
    assert [p.has_image for p in posts] == [True, False, True]
    assert posts[2].author == "Unknown"
    assert posts[2].body == ""
    assert posts[2].created_at == NOW


def test_listing_without_data_or_children_is_empty():
    assert normalize_listing({}, "pets") == []
    assert normalize_listing({"data": {}}, "pets") == []


def test_listing_child_without_data_normalizes_to_defaults():
    posts = normalize_listing({"data": {"children": [{"kind": "t3"}, None]}}, "pets", now=NOW)
    assert len(posts) == 2
    assert all(p.author == "Unknown" and p.source_group == "pets" for p in posts)


@pytest.mark.parametrize(
    "payload",
    [
        [],
        "not a listing",
        {"data": []},
        {"data": {"children": {"0": {}}}},
    ],
)
def test_listing_with_wrong_structure_is_malformed(payload):
    with pytest.raises(MalformedPayloadError):
        normalize_listing(payload, "pets")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("pets", "pets"),
        ("  Dogs ", "Dogs"),
        ("r/cats", "cats"),
        ("/r/aww/", "aww"),
        ("R/Rabbits", "Rabbits"),
        ("guinea_pigs", "guinea_pigs"),
    ],
)
def test_normalize_subreddit_accepts_valid_names(raw, expected):
    assert normalize_subreddit(raw) == expected


@pytest.mark.parametrize("raw", ["", "a", "pets/../admin", "pets?x=1", "has space", "x" * 22])
def test_normalize_subreddit_rejects_invalid_names(raw):
    with pytest.raises(ValueError):
        normalize_subreddit(raw)


def test_post_api_shape():
    post = normalize_post(_FULL_ITEM, "pets", now=NOW)

    assert post.to_api_dict() == {
        "title": "Dog ate a sock",
        "selftext": "Should I call the vet?",
        "created_utc": 1700000000.0,
        "author": "bob",
        "subreddit": "dogs",
        "hasImage": True,
        "source": "Reddit",
    }
