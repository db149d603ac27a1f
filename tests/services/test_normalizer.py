import datetime

import pytest

from app.schemas.blog import SlugRef
from app.services.normalizer import (
    format_display_date,
    has_image_asset,
    normalize_slug,
    to_author,
    to_category,
    to_category_refs,
    to_post_detail,
    to_post_summaries,
    to_post_summary,
    to_total,
)
from app.services.portable_text import render_portable_text
from tests.conftest import make_image, make_post_record


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("hello", "hello"),
        ("  padded  ", "padded"),
        ({"_type": "slug", "current": "wrapped"}, "wrapped"),
        (SlugRef(current="model"), "model"),
        ({"current": 42}, ""),
        ({"other": "x"}, ""),
        (None, ""),
        (7, ""),
        (3.5, ""),
        ([], ""),
    ],
)
def test_normalize_slug(value, expected):
    assert normalize_slug(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (make_image(), True),
        ({"asset": {"_ref": ""}}, False),
        ({"asset": {"_ref": 12}}, False),
        ({"asset": {"_id": "image-x"}}, False),
        ({"asset": "image-abc"}, False),
        ({}, False),
        (None, False),
        ("image-abc-10x10-png", False),
    ],
)
def test_has_image_asset(value, expected):
    assert has_image_asset(value) is expected


def test_format_display_date_utc_timestamp():
    result = format_display_date("2024-03-05T00:00:00Z")

    assert result == "2024年3月5日"
    assert "2024" in result and "3月" in result and "5日" in result


def test_format_display_date_converts_to_display_timezone():
    # 23:30 UTC on the 4th is already the 5th in Tokyo, still the 4th in UTC
    assert format_display_date("2024-03-04T23:30:00Z") == "2024年3月5日"
    assert format_display_date("2024-03-04T23:30:00Z", "UTC") == "2024年3月4日"


def test_format_display_date_plain_date_and_objects():
    assert format_display_date("2023-12-31") == "2023年12月31日"
    assert format_display_date(datetime.date(2022, 1, 2)) == "2022年1月2日"


@pytest.mark.parametrize("value", [None, "", "   ", "not a date", "2024-13-45", 12345, {}])
def test_format_display_date_returns_empty_for_unknown(value):
    assert format_display_date(value) == ""


def test_format_display_date_unknown_timezone_falls_back_to_utc(caplog):
    with caplog.at_level("WARNING"):
        assert format_display_date("2024-03-05T00:00:00Z", "Nowhere/Atlantis") == "2024年3月5日"
    assert any("Unknown timezone" in rec.message for rec in caplog.records)


def test_to_post_summary_maps_fields_and_images():
    seen = []

    def image_url(source, width, height):
        seen.append((width, height))
        return "https://img" if has_image_asset(source) else None

    record = make_post_record(slug={"current": "wrapped-slug"})
    post = to_post_summary(record, image_url)

    assert post.id == "post1"
    assert post.slug == "wrapped-slug"
    assert post.image_url == "https://img"
    assert post.display_date == "2024年3月5日"
    assert post.author.name == "Ada"
    assert post.category_ids == ["catA"]
    assert (1200, 630) in seen


def test_to_post_summary_falls_back_to_created_at():
    record = make_post_record(published_at=None)

    post = to_post_summary(record)

    assert post.published_at == "2024-01-01T00:00:00Z"
    assert post.display_date == "2024年1月1日"


def test_to_post_summary_tolerates_malformed_fields():
    record = {
        "_id": "p",
        "title": 99,
        "slug": {"nope": True},
        "mainImage": "string-image",
        "publishedAt": "garbage",
        "excerpt": ["x"],
        "author": "someone",
        "categories": [None, "x", {"_id": "c1"}, {"_id": "c2", "title": "Ok", "slug": None}],
    }

    post = to_post_summary(record, lambda s, w, h: None)

    assert post.title == "Untitled"
    assert post.slug == ""
    assert post.image_url is None
    assert post.display_date == ""
    assert post.excerpt is None
    assert post.author is None
    assert [(c.id, c.slug) for c in post.categories] == [("c2", "")]


@pytest.mark.parametrize("value", [None, [], "post", 1, {"title": "no id"}])
def test_to_post_summary_rejects_non_records(value):
    assert to_post_summary(value) is None


def test_to_post_summaries_skips_bad_entries():
    records = [make_post_record(), None, {"title": "no id"}, make_post_record("post2")]

    assert [p.id for p in to_post_summaries(records)] == ["post1", "post2"]
    assert to_post_summaries({"not": "a list"}) == []


def test_to_post_detail_renders_body_when_present():
    record = make_post_record(body=[{"_type": "block"}])

    post = to_post_detail(record, render_rich_text=lambda blocks: "<p>rendered</p>")

    assert post.body_html == "<p>rendered</p>"


def test_to_post_detail_without_body():
    post = to_post_detail(make_post_record(), render_rich_text=lambda blocks: "unused")

    assert post.body_html == ""
    assert to_post_detail(None) is None


def test_to_author_uses_picture_alt_or_name():
    record = {
        "_id": "a1",
        "name": "Ada",
        "slug": {"current": "ada"},
        "picture": make_image(alt="Ada smiling"),
        "bio": [{"_type": "block"}],
    }

    author = to_author(record, lambda s, w, h: f"url-{w}x{h}", lambda b: "<p>bio</p>")

    assert author.slug == "ada"
    assert author.picture_url == "url-160x160"
    assert author.picture_alt == "Ada smiling"
    assert author.bio_html == "<p>bio</p>"

    plain = to_author({"_id": "a2", "name": "Bob", "slug": "bob"})
    assert plain.picture_alt == "Bob portrait"
    assert plain.bio_html == ""


def test_to_category_and_refs():
    category = to_category(
        {"_id": "c1", "title": "Python", "slug": "python", "description": "Snakes"}
    )
    assert category.description == "Snakes"
    assert to_category(None) is None
    assert to_category({"title": "No id"}) is None
    assert to_category_refs("nope") == []


@pytest.mark.parametrize("title", [None, 42, ["Python"], ""])
def test_to_category_without_usable_title_falls_back_to_slug(title):
    category = to_category({"_id": "c1", "title": title, "slug": {"current": "python"}})

    assert category.id == "c1"
    assert category.title == "python"
    assert category.slug == "python"


def test_to_category_refs_drops_untitled_entries():
    refs = to_category_refs([{"_id": "c1", "slug": "a"}, {"_id": "c2", "title": "B", "slug": "b"}])

    assert [r.id for r in refs] == ["c2"]


@pytest.mark.parametrize(
    ("value", "expected"), [(25, 25), (0, 0), (-3, 0), (None, 0), ("25", 0), (True, 0)]
)
def test_to_total(value, expected):
    assert to_total(value) == expected


def test_format_display_date_out_of_range_conversion_returns_empty():
    # shifting into Tokyo time would land in year 10000
    assert format_display_date("9999-12-31T23:00:00+00:00") == ""
    assert format_display_date("9999-12-31T23:00:00+00:00", "UTC") == "9999年12月31日"


def test_post_summary_with_out_of_range_date_still_maps():
    post = to_post_summary(make_post_record(published_at="9999-12-31T23:00:00+00:00"))

    assert post.id == "post1"
    assert post.display_date == ""


def test_to_post_detail_survives_malformed_body_blocks():
    record = make_post_record(
        body=[
            {"_type": "block", "style": ["x"], "children": [{"_type": "span", "text": "a"}]},
            {"_type": "block", "listItem": {"x": 1}, "children": []},
            {"_type": "block", "children": [{"_type": "span", "text": "b", "marks": [["strong"]]}]},
        ]
    )

    post = to_post_detail(record, None, render_portable_text)

    assert post.body_html == "<p>a</p><p></p><p>b</p>"


def test_normalize_slug_rejects_arbitrary_objects():
    class Holder:
        current = "sneaky"

    assert normalize_slug(Holder()) == ""
