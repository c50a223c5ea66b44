"""Unit tests for text normalization and cover reference helpers."""

from __future__ import annotations

import pytest

from src.utils.cover_reference import (
    has_cover_value,
    is_external_cover,
    make_cover_link,
    normalize_cover_target,
    unwrap_cover_value,
)
from src.utils.text_normalizer import (
    ext_from_content_type,
    ext_from_url,
    make_artist_title_key,
    normalize_lookup_value,
    sanitize_name,
    slugify,
    to_price,
    to_text,
)


# ======================================================================
# to_text / to_price
# ======================================================================


class TestToText:
    def test_none_is_empty(self) -> None:
        assert to_text(None) == ""

    def test_trims(self) -> None:
        assert to_text("  Burial ") == "Burial"

    def test_number(self) -> None:
        assert to_text(2007) == "2007"

    def test_list_uses_first_item(self) -> None:
        assert to_text([" a ", "b"]) == "a"

    def test_empty_list(self) -> None:
        assert to_text([]) == ""


class TestToPrice:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("25", 25.0), ("19,99", 19.99), (12.5, 12.5), (" 7.5 ", 7.5)],
    )
    def test_valid_prices(self, raw: object, expected: float) -> None:
        assert to_price(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", [None, "", "free", "0", "-3", "nan", "inf"])
    def test_invalid_or_non_positive(self, raw: object) -> None:
        assert to_price(raw) is None


# ======================================================================
# Identity keys and names
# ======================================================================


class TestArtistTitleKey:
    def test_lowercases_and_collapses_whitespace(self) -> None:
        assert normalize_lookup_value("  The   CURE ") == "the cure"

    def test_key_uses_double_colon(self) -> None:
        assert make_artist_title_key("Burial", "Untrue") == "burial::untrue"

    def test_case_and_spacing_insensitive(self) -> None:
        assert make_artist_title_key("Burial ", "UNTRUE") == make_artist_title_key(" burial", "untrue")


class TestSanitizeName:
    def test_removes_forbidden_characters(self) -> None:
        assert sanitize_name('AC/DC: "Live" <1992>?') == "ACDC Live 1992"

    def test_keeps_unicode(self) -> None:
        assert sanitize_name("Кино") == "Кино"


class TestSlugify:
    def test_ascii(self) -> None:
        assert slugify("Burial Untrue") == "burial-untrue"

    def test_transliterates_cyrillic(self) -> None:
        assert slugify("Кино Группа крови") == "kino-gruppa-krovi"

    def test_strips_accents(self) -> None:
        assert slugify("Björk Homogénic") == "bjork-homogenic"

    def test_fallback(self) -> None:
        assert slugify("!!!") == "cover"


class TestExtensions:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://i.discogs.com/a/b/R-1.jpeg", "jpg"),
            ("https://i.discogs.com/a/b/R-1.JPG?x=1", "jpg"),
            ("https://example.com/cover.png", "png"),
            ("https://example.com/cover.webp#frag", "webp"),
            ("https://example.com/cover.svg", "svg"),
            ("https://example.com/cover.gif", ""),
            ("https://example.com/cover", ""),
        ],
    )
    def test_ext_from_url(self, url: str, expected: str) -> None:
        assert ext_from_url(url) == expected

    @pytest.mark.parametrize(
        ("content_type", "expected"),
        [
            ("image/jpeg", "jpg"),
            ("image/png; charset=binary", "png"),
            ("image/webp", "webp"),
            ("image/svg+xml", "svg"),
            ("application/octet-stream", ""),
            (None, ""),
        ],
    )
    def test_ext_from_content_type(self, content_type: str | None, expected: str) -> None:
        assert ext_from_content_type(content_type) == expected


# ======================================================================
# Cover references
# ======================================================================


class TestCoverReference:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("[[Vinyl/covers/a.jpg]]", "Vinyl/covers/a.jpg"),
            ("[[Vinyl/covers/a.jpg|300]]", "Vinyl/covers/a.jpg"),
            ("![](https://img.example/a.jpg)", "https://img.example/a.jpg"),
            ("![cover](Vinyl/covers/b.png)", "Vinyl/covers/b.png"),
            ("https://img.example/a.jpg?w=300|x", "https://img.example/a.jpg?w=300|x"),
            ("Vinyl/covers/c.webp", "Vinyl/covers/c.webp"),
            ("   ", ""),
        ],
    )
    def test_normalize_cover_target(self, raw: str, expected: str) -> None:
        assert normalize_cover_target(raw) == expected

    def test_unwrap_mapping_path(self) -> None:
        assert unwrap_cover_value({"path": "Vinyl/covers/a.jpg"}) == "[[Vinyl/covers/a.jpg]]"

    def test_unwrap_mapping_url(self) -> None:
        assert unwrap_cover_value({"url": "https://img.example/a.jpg"}) == "https://img.example/a.jpg"

    def test_unwrap_list(self) -> None:
        assert unwrap_cover_value(["[[a.jpg]]", "[[b.jpg]]"]) == "[[a.jpg]]"

    @pytest.mark.parametrize("raw", [None, "", "  ", [], {}, {"path": ""}])
    def test_has_cover_value_false(self, raw: object) -> None:
        assert has_cover_value(raw) is False

    @pytest.mark.parametrize(
        "raw",
        ["[[Vinyl/covers/a.jpg]]", "https://img.example/a.jpg", {"value": "a.jpg"}, ["a.jpg"]],
    )
    def test_has_cover_value_true(self, raw: object) -> None:
        assert has_cover_value(raw) is True

    def test_is_external_cover(self) -> None:
        assert is_external_cover("https://img.example/a.jpg")
        assert is_external_cover("data:image/png;base64,AAA")
        assert not is_external_cover("Vinyl/covers/a.jpg")

    def test_make_cover_link(self) -> None:
        assert make_cover_link("Vinyl/covers/discogs-1.jpg") == "[[Vinyl/covers/discogs-1.jpg]]"
