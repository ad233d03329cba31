"""Unit tests for naming.py."""

from __future__ import annotations

import pytest

from connectgen.naming import (
    is_bare_identifier,
    normalize_key,
    sanitize_filename,
    sanitize_slug,
    split_title,
    to_camel_case,
    to_enum_token,
    to_identifier,
    to_kebab_case,
    to_pascal_case,
    to_token_name,
)


class TestCaseConversion:

    @pytest.mark.parametrize("raw,expected", [
        ("Icon Start", "iconStart"),
        ("icon-start", "iconStart"),
        ("ICON_START", "iconStart"),
        ("  Size ", "size"),
        ("", ""),
    ])
    def test_to_camel_case(self, raw, expected):
        assert to_camel_case(raw) == expected

    def test_kebab_and_pascal(self):
        assert to_kebab_case("IconButton") == "icon-button"
        assert to_kebab_case("Icon Button") == "icon-button"
        assert to_pascal_case("icon button") == "IconButton"
        assert to_pascal_case("") == "Component"

    def test_split_title(self):
        assert split_title("iconLabel") == "Icon Label"
        assert split_title("children") == "Children"
        assert split_title("") == "Text"


class TestIdentifiers:

    @pytest.mark.parametrize("raw,expected", [
        (".iconStart?", "iconStart"),
        ("Show Icon", "showIcon"),
        ("aria-label", "ariaLabel"),
        ("Size", "size"),
        ("2 columns", "_2Columns"),
        ("???", "prop"),
    ])
    def test_to_identifier(self, raw, expected):
        assert to_identifier(raw) == expected

    def test_normalize_key(self):
        assert normalize_key(".iconStart?") == "iconstart"
        assert normalize_key(" Label ") == "label"
        assert normalize_key(None) == ""

    def test_bare_identifier(self):
        assert is_bare_identifier("leftIcon")
        assert is_bare_identifier("$el")
        assert not is_bare_identifier("Extra Large")
        assert not is_bare_identifier("2x")


class TestTokensAndSlugs:

    def test_enum_token(self):
        assert to_enum_token("Extra Large!") == "extra_large"

    def test_token_name(self):
        assert to_token_name("Icon Button") == "<FIGMA_ICON_BUTTON>"
        assert to_token_name(None) == "<FIGMA_NODE>"

    def test_slug_and_filename(self):
        assert sanitize_slug("Forms / Button") == "forms_button"
        assert sanitize_slug("!!!") == "component"
        assert sanitize_filename("---") == "_"
        assert sanitize_filename("Button Group") == "button_group"
