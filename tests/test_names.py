"""Tests for display-name normalization."""

from __future__ import annotations

import re

import pytest

from levante_catalog.catalog.names import FALLBACK_NAME, MAX_NAME_LENGTH, normalize_name

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.:-]{0,63}$")

_SAMPLES = [
    "",
    "   ",
    "Docling",
    "My Cool Server",
    "Señor Búsqueda",
    "Straße & Co.",
    "C++ / Rust (beta)",
    "123 start",
    "-dash-first",
    "!!!???",
    "€$£¥",
    "日本語のサーバー",
    "tab\tand\nnewline",
    "name@host:8080",
    "x" * 200,
    "éééé" * 30,
    "_already_valid-1.0:ok",
]


class TestNormalizeName:
    def test_plain_name_unchanged(self):
        assert normalize_name("docling") == "docling"

    def test_whitespace_to_underscore(self):
        assert normalize_name("My  Cool\tServer") == "My_Cool_Server"

    def test_diacritics(self):
        assert normalize_name("Señor Búsqueda") == "Senor_Busqueda"
        assert normalize_name("Straße") == "Strasse"
        assert normalize_name("Ça va") == "Ca_va"

    def test_symbol_replacements(self):
        assert normalize_name("A & B") == "A_and_B"
        assert normalize_name("C++") == "Cplusplus"
        assert normalize_name("me@home") == "meathome"
        assert normalize_name("a/b\\c") == "a-b-c"

    def test_quotes_and_brackets_removed(self):
        assert normalize_name("Bob's \"Server\" (v2)") == "Bobs_Server_v2"

    def test_leading_digit_gets_underscore(self):
        assert normalize_name("123abc") == "_123abc"

    def test_leading_dash_gets_underscore(self):
        assert normalize_name("-x") == "_-x"

    def test_truncated(self):
        result = normalize_name("a" * 100)
        assert len(result) == MAX_NAME_LENGTH

    def test_empty_fallback(self):
        assert normalize_name("") == FALLBACK_NAME

    def test_only_disallowed_fallback(self):
        assert normalize_name("!?#%") == FALLBACK_NAME
        assert normalize_name("日本語") == FALLBACK_NAME

    @pytest.mark.parametrize("raw", _SAMPLES)
    def test_output_is_identifier(self, raw):
        assert _IDENTIFIER_RE.match(normalize_name(raw))

    @pytest.mark.parametrize("raw", _SAMPLES)
    def test_idempotent(self, raw):
        once = normalize_name(raw)
        assert normalize_name(once) == once
