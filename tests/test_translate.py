"""Tests for template interpolation and translation fallback."""

import logging

from calcdeck_pkg import translate
from calcdeck_pkg.translate import (
    Translator,
    interpolate,
    lookup,
    merge_bundles,
    render_bundle,
    translate_phrase,
    translate_text,
)

BUNDLES = {
    "en": {
        "name": "Demo",
        "inputs": {"amount": {"label": "Amount", "options": {"a": "Option A"}}},
        "results": {"total": {"label": "Total"}, "only_en": {"label": "English only"}},
        "formats": {"summary": "Total is {total}."},
    },
    "es": {
        "name": "Demostración",
        "results": {"total": {"label": "Total (es)"}, "only_en": {"label": ""}},
        "formats": {"summary": "El total es {total}."},
    },
}


class TestInterpolate:
    def test_substitutes_known_placeholders(self):
        assert interpolate("Tip {tip}, total {total}", {"tip": "$1", "total": "$2"}) == "Tip $1, total $2"

    def test_unknown_placeholder_is_left_literal(self):
        assert interpolate("Tip {tip}, total {total}", {"tip": "$1"}) == "Tip $1, total {total}"

    def test_none_value_is_left_literal(self):
        assert interpolate("Weeks: {weeks}", {"weeks": None}) == "Weeks: {weeks}"

    def test_empty_template(self):
        assert interpolate(None, {"a": 1}) == ""
        assert interpolate("", {"a": 1}) == ""


class TestLookup:
    def test_requested_locale_wins(self):
        assert lookup(BUNDLES, "es", "results.total.label") == "Total (es)"

    def test_missing_key_falls_back_to_english(self):
        assert lookup(BUNDLES, "es", "inputs.amount.label") == "Amount"

    def test_empty_string_falls_back_to_english(self):
        assert lookup(BUNDLES, "es", "results.only_en.label") == "English only"

    def test_missing_everywhere_uses_default_then_key(self):
        assert lookup(BUNDLES, "es", "results.nope.label", "Fallback") == "Fallback"
        assert lookup(BUNDLES, "es", "results.nope.label") == "results.nope.label"

    def test_missing_key_warns_once(self, caplog):
        with caplog.at_level(logging.WARNING, logger="calcdeck.translate"):
            lookup(BUNDLES, "fr", "results.warn_once.label")
            lookup(BUNDLES, "fr", "results.warn_once.label")
        messages = [r.getMessage() for r in caplog.records if "warn_once" in r.getMessage()]
        assert len(messages) == 1


class TestRenderBundle:
    def test_requested_locale_is_merged_over_english(self):
        bundle, is_fallback = render_bundle(BUNDLES, "es")
        assert is_fallback is False
        assert bundle["name"] == "Demostración"
        assert bundle["inputs"]["amount"]["label"] == "Amount"
        assert bundle["results"]["only_en"]["label"] == "English only"

    def test_unknown_locale_falls_back(self):
        bundle, is_fallback = render_bundle(BUNDLES, "de")
        assert is_fallback is True
        assert bundle["name"] == "Demo"

    def test_english_is_not_a_fallback(self):
        _, is_fallback = render_bundle(BUNDLES, "en")
        assert is_fallback is False

    def test_merge_does_not_mutate_inputs(self):
        base = {"a": {"b": "1"}}
        merged = merge_bundles(base, {"a": {"b": "2"}})
        assert merged == {"a": {"b": "2"}}
        assert base == {"a": {"b": "1"}}


class TestTranslator:
    def test_labels(self):
        tr = Translator(BUNDLES, "es")
        assert tr.result_label("total") == "Total (es)"
        assert tr.input_label("amount") == "Amount"
        assert tr.option_label("amount", "a") == "Option A"
        assert tr.option_label("amount", "zzz") == "zzz"

    def test_unknown_locale_binds_english(self):
        tr = Translator(BUNDLES, "pt")
        assert tr.locale == "en"
        assert tr.is_fallback is True


class TestCommonPhrases:
    def test_translate_phrase(self):
        assert translate_phrase("months", "es") == "meses"
        assert translate_phrase("fortnight", "es") == "fortnight"

    def test_longest_phrase_wins(self):
        assert translate_text("Total interest paid", "es") == "Interés total paid"

    def test_whole_words_only(self):
        assert translate_text("4 years and 2 months", "de") == "4 Jahre und 2 Monate"
        assert translate_text("Mandy", "es") == "Mandy"

    def test_english_is_unchanged(self):
        assert translate_text("4 years", "en") == "4 years"

    def test_case_insensitive_match(self):
        assert translate_text("TOTAL INTEREST", "es") == "Interés total"

    def test_pattern_is_built_once(self, monkeypatch):
        def _no_compile(*args, **kwargs):
            raise AssertionError("pattern rebuilt per call")

        monkeypatch.setattr(translate.re, "compile", _no_compile)
        assert translate_text("3 months", "es") == "3 meses"
