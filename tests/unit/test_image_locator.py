from __future__ import annotations

import json

from bs4 import BeautifulSoup

from recipebox.services.image_locator import (
    find_content_image,
    find_json_ld_image,
    locate_image,
    resolve_url,
)

BASE_URL = "https://cooking.example.com/recipes/chili"


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def _json_ld(data: object) -> str:
    return f'<script type="application/ld+json">{json.dumps(data)}</script>'


class TestOpenGraph:
    def test_property_before_content(self) -> None:
        html = '<meta property="og:image" content="https://cdn.example.com/chili.jpg">'

        assert locate_image(html, BASE_URL) == "https://cdn.example.com/chili.jpg"

    def test_content_before_property(self) -> None:
        html = "<meta content='/img/chili.jpg' property='og:image' />"

        assert locate_image(html, BASE_URL) == "https://cooking.example.com/img/chili.jpg"

    def test_wins_over_json_ld_and_images(self) -> None:
        html = (
            '<img src="/photos/big.jpg" width="800">'
            + _json_ld({"@type": "Recipe", "image": "https://cdn.example.com/ld.jpg"})
            + '<meta property="og:image" content="https://cdn.example.com/og.jpg">'
        )

        assert locate_image(html, BASE_URL) == "https://cdn.example.com/og.jpg"

    def test_entities_in_url_are_decoded(self) -> None:
        html = '<meta property="og:image" content="https://cdn.example.com/i.jpg?w=1200&amp;h=800">'

        assert locate_image(html, BASE_URL) == "https://cdn.example.com/i.jpg?w=1200&h=800"


class TestJsonLd:
    def test_plain_string_image(self) -> None:
        html = _json_ld({"@type": "Recipe", "image": "https://cdn.example.com/a.jpg"})

        assert locate_image(html, BASE_URL) == "https://cdn.example.com/a.jpg"

    def test_array_image_takes_first(self) -> None:
        html = _json_ld({"@type": "Recipe", "image": ["/first.jpg", "/second.jpg"]})

        assert locate_image(html, BASE_URL) == "https://cooking.example.com/first.jpg"

    def test_object_image_uses_url(self) -> None:
        html = _json_ld({"@type": "Recipe", "image": {"@type": "ImageObject", "url": "https://cdn.example.com/o.jpg"}})

        assert locate_image(html, BASE_URL) == "https://cdn.example.com/o.jpg"

    def test_recipe_inside_top_level_array(self) -> None:
        html = _json_ld([
            {"@type": "WebSite", "image": "https://cdn.example.com/site.jpg"},
            {"@type": "Recipe", "image": "https://cdn.example.com/recipe.jpg"},
        ])

        assert find_json_ld_image(_soup(html)) == "https://cdn.example.com/recipe.jpg"

    def test_recipe_inside_graph(self) -> None:
        html = _json_ld({"@graph": [{"@type": ["Recipe", "Thing"], "image": "https://cdn.example.com/g.jpg"}]})

        assert find_json_ld_image(_soup(html)) == "https://cdn.example.com/g.jpg"

    def test_malformed_block_is_skipped(self) -> None:
        html = (
            '<script type="application/ld+json">{ not json </script>'
            + _json_ld({"@type": "Recipe", "image": "https://cdn.example.com/ok.jpg"})
        )

        assert locate_image(html, BASE_URL) == "https://cdn.example.com/ok.jpg"

    def test_non_recipe_blocks_are_ignored(self) -> None:
        html = _json_ld({"@type": "Article", "image": "https://cdn.example.com/article.jpg"})

        assert find_json_ld_image(_soup(html)) is None

    def test_wins_over_content_images(self) -> None:
        html = '<img src="/photos/big.jpg">' + _json_ld({"@type": "Recipe", "image": "/ld.jpg"})

        assert locate_image(html, BASE_URL) == "https://cooking.example.com/ld.jpg"


class TestContentImages:
    def test_skips_excluded_sources(self) -> None:
        html = (
            '<img src="/static/logo.png">'
            '<img src="/icons/share.png">'
            '<img src="/u/avatar-12.jpg">'
            '<img src="/img/divider.svg">'
            '<img src="data:image/gif;base64,R0lGOD">'
            '<img src="/t/1x1.gif">'
            '<img src="/t/pixel.gif">'
            '<img src="/ad-banner.jpg">'
            '<img src="/photos/chili-bowl.jpg">'
        )

        assert locate_image(html, BASE_URL) == "https://cooking.example.com/photos/chili-bowl.jpg"

    def test_skips_small_declared_width(self) -> None:
        html = '<img src="/thumb.jpg" width="120"><img width="640" src="/hero.jpg">'

        assert find_content_image(_soup(html)) == "/hero.jpg"

    def test_width_at_threshold_is_accepted(self) -> None:
        assert find_content_image(_soup('<img src="/ok.jpg" width="200">')) == "/ok.jpg"

    def test_data_src_is_not_the_source(self) -> None:
        html = '<img data-src="/lazy.jpg" src="/real.jpg">'

        assert find_content_image(_soup(html)) == "/real.jpg"

    def test_none_when_nothing_survives(self) -> None:
        html = '<img src="/logo.png"><img src="/small.jpg" width="50">'

        assert locate_image(html, BASE_URL) is None

    def test_empty_html(self) -> None:
        assert locate_image("", BASE_URL) is None


class TestResolveUrl:
    def test_relative_is_resolved(self) -> None:
        assert resolve_url("../img/a.jpg", BASE_URL) == "https://cooking.example.com/img/a.jpg"

    def test_protocol_relative(self) -> None:
        assert resolve_url("//cdn.example.com/a.jpg", BASE_URL) == "https://cdn.example.com/a.jpg"

    def test_absolute_is_unchanged(self) -> None:
        assert resolve_url("https://other.example.com/a.jpg", BASE_URL) == "https://other.example.com/a.jpg"

    def test_unresolvable_returned_as_is(self) -> None:
        assert resolve_url("/a.jpg", "http://[bad") == "/a.jpg"
