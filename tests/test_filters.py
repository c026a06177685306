from access_audit.client.filters import ALL_TAGS, available_tags, filter_by_tag
from access_audit.client.formatting import remove_hyphen, remove_scheme

from conftest import make_item


def _items():
    return [
        make_item("a", tags=("wcag2a", "cat.color")),
        make_item("b", tags=("cat.color",)),
        make_item("c", tags=("wcag2aa", "wcag2a")),
    ]


def test_available_tags_start_with_all_and_keep_first_seen_order():
    assert available_tags(_items()) == ("all", "wcag2a", "cat.color", "wcag2aa")


def test_available_tags_of_empty_category():
    assert available_tags([]) == (ALL_TAGS,)


def test_filter_all_returns_every_item():
    items = _items()
    assert filter_by_tag(items, ALL_TAGS) == items


def test_filter_keeps_exact_tag_matches_in_order():
    assert [item.id for item in filter_by_tag(_items(), "wcag2a")] == ["a", "c"]


def test_filter_does_not_match_prefixes():
    assert filter_by_tag(_items(), "wcag2") == []


def test_remove_hyphen():
    assert remove_hyphen("color-contrast") == "color contrast"
    assert remove_hyphen("image-alt-text") == "image alt text"


def test_remove_scheme():
    assert remove_scheme("https://www.example.com/") == "example.com"
    assert remove_scheme("http://example.com/docs//") == "example.com/docs"
