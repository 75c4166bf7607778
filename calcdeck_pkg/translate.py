"""Template interpolation and locale-aware lookups for translation bundles.

This module provides:
- interpolate: ``{placeholder}`` substitution that leaves unknown
  placeholders untouched
- lookup: dotted-key access into a bundle with English and raw-key fallback
- Translator: a bundle bound to one locale, with convenience getters
- translate_text: word-level translation of common dynamic phrases
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from .config import DEFAULT_LOCALE
from .logging_config import get_logger

logger = get_logger("translate")

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")

# (locale, key) pairs already reported as missing
_reported_missing: set[tuple[str, str]] = set()


def interpolate(template: str | None, params: Mapping[str, Any]) -> str:
    """Substitute ``{name}`` placeholders in a template.

    Placeholders without a matching parameter are kept literally, so a
    template authored for a newer result set never raises.

    Example:
        >>> interpolate("Tip: {tip}. Total: {total}", {"tip": "$13.50"})
        'Tip: $13.50. Total: {total}'
    """
    if not template:
        return ""

    def _sub(match: re.Match) -> str:
        name = match.group(1)
        if name in params and params[name] is not None:
            return str(params[name])
        return match.group(0)

    return _PLACEHOLDER_RE.sub(_sub, template)


def _walk(bundle: Mapping[str, Any] | None, key: str) -> Any:
    current: Any = bundle
    for part in key.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    return current


def _report_missing(locale: str, key: str) -> None:
    if (locale, key) in _reported_missing:
        return
    _reported_missing.add((locale, key))
    logger.warning("Missing translation '%s' for locale '%s'", key, locale)


def lookup(
    bundles: Mapping[str, Mapping[str, Any]],
    locale: str,
    key: str,
    default: str | None = None,
) -> str:
    """Look up a dotted key, falling back to English, then ``default``, then the key.

    Args:
        bundles: Mapping of locale -> translation bundle
        locale: Requested locale
        key: Dotted path, e.g. "results.monthly_payment.label"
        default: Text used when no bundle has the key

    Returns:
        The translated string; never raises for a missing key
    """
    value = _walk(bundles.get(locale), key)
    if isinstance(value, str) and value:
        return value
    _report_missing(locale, key)
    if locale != DEFAULT_LOCALE:
        value = _walk(bundles.get(DEFAULT_LOCALE), key)
        if isinstance(value, str) and value:
            return value
    return default if default is not None else key


def get_text(t: Mapping[str, Any] | None, key: str, default: str) -> str:
    """Read a dotted key from a single rendered bundle, or return ``default``."""
    value = _walk(t, key)
    if isinstance(value, str) and value:
        return value
    return default


def merge_bundles(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge ``override`` onto ``base``; empty strings do not override."""
    merged: dict[str, Any] = {}
    for key, value in base.items():
        merged[key] = merge_bundles(value, {}) if isinstance(value, Mapping) else value
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_bundles(merged[key], value)
        elif isinstance(value, Mapping):
            merged[key] = merge_bundles(value, {})
        elif value != "":
            merged[key] = value
    return merged


def render_bundle(
    bundles: Mapping[str, Mapping[str, Any]], locale: str
) -> tuple[dict[str, Any], bool]:
    """Bundle handed to a compute function, with English filling any gaps.

    Returns:
        Tuple of (bundle, is_fallback). ``is_fallback`` is True when the
        requested locale has no bundle at all.
    """
    base = bundles.get(DEFAULT_LOCALE, {})
    if locale in bundles:
        return merge_bundles(base, bundles[locale]), False
    if locale != DEFAULT_LOCALE:
        logger.warning("No '%s' bundle, falling back to '%s'", locale, DEFAULT_LOCALE)
    return merge_bundles(base, {}), locale != DEFAULT_LOCALE


class Translator:
    """Translation bundle bound to a locale, with English fallback."""

    def __init__(self, bundles: Mapping[str, Mapping[str, Any]], locale: str):
        self.bundles = bundles
        self.locale = locale if locale in bundles else DEFAULT_LOCALE
        self.is_fallback = self.locale != locale

    @property
    def bundle(self) -> Mapping[str, Any]:
        return self.bundles.get(self.locale, {})

    def __call__(self, key: str, default: str | None = None) -> str:
        return lookup(self.bundles, self.locale, key, default)

    def input_label(self, input_id: str) -> str:
        return self(f"inputs.{input_id}.label", input_id)

    def option_label(self, input_id: str, option: Any) -> str:
        return self(f"inputs.{input_id}.options.{option}", str(option))

    def result_label(self, result_id: str) -> str:
        return self(f"results.{result_id}.label", result_id)


# Common words and phrases that appear in computed strings, per locale.
COMMON_PHRASES: dict[str, dict[str, str]] = {
    "month": {"es": "mes", "pt": "mês", "fr": "mois", "de": "Monat"},
    "months": {"es": "meses", "pt": "meses", "fr": "mois", "de": "Monate"},
    "year": {"es": "año", "pt": "ano", "fr": "an", "de": "Jahr"},
    "years": {"es": "años", "pt": "anos", "fr": "ans", "de": "Jahre"},
    "week": {"es": "semana", "pt": "semana", "fr": "semaine", "de": "Woche"},
    "weeks": {"es": "semanas", "pt": "semanas", "fr": "semaines", "de": "Wochen"},
    "day": {"es": "día", "pt": "dia", "fr": "jour", "de": "Tag"},
    "days": {"es": "días", "pt": "dias", "fr": "jours", "de": "Tage"},
    "Total": {"es": "Total", "pt": "Total", "fr": "Total", "de": "Gesamt"},
    "Total interest": {
        "es": "Interés total", "pt": "Juros totais",
        "fr": "Intérêts totaux", "de": "Gesamtzinsen",
    },
    "Total cost": {"es": "Costo total", "pt": "Custo total", "fr": "Coût total", "de": "Gesamtkosten"},
    "Monthly payment": {
        "es": "Pago mensual", "pt": "Pagamento mensal",
        "fr": "Paiement mensuel", "de": "Monatliche Zahlung",
    },
    "Principal": {"es": "Capital", "pt": "Principal", "fr": "Principal", "de": "Hauptbetrag"},
    "Interest": {"es": "Interés", "pt": "Juros", "fr": "Intérêts", "de": "Zinsen"},
    "Balance": {"es": "Saldo", "pt": "Saldo", "fr": "Solde", "de": "Kontostand"},
    "calories": {"es": "calorías", "pt": "calorias", "fr": "calories", "de": "Kalorien"},
    "Underweight": {"es": "Bajo peso", "pt": "Abaixo do peso", "fr": "Insuffisance pondérale", "de": "Untergewicht"},
    "Normal": {"es": "Normal", "pt": "Normal", "fr": "Normal", "de": "Normal"},
    "Overweight": {"es": "Sobrepeso", "pt": "Sobrepeso", "fr": "Surpoids", "de": "Übergewicht"},
    "and": {"es": "y", "pt": "e", "fr": "et", "de": "und"},
    "or": {"es": "o", "pt": "ou", "fr": "ou", "de": "oder"},
}

# Longest phrases first so "Total interest" wins over "Total"
_PHRASE_KEYS = sorted(COMMON_PHRASES, key=len, reverse=True)
_PHRASE_RE = re.compile(
    r"\b(" + "|".join(re.escape(k) for k in _PHRASE_KEYS) + r")\b",
    re.IGNORECASE,
)
_PHRASE_BY_LOWER = {k.lower(): k for k in _PHRASE_KEYS}


def translate_phrase(phrase: str, locale: str) -> str:
    """Translate one known phrase, returning it unchanged when unknown."""
    return COMMON_PHRASES.get(phrase, {}).get(locale, phrase)


def translate_text(text: str, locale: str) -> str:
    """Translate every known common phrase inside free text.

    Matching is whole-word and case-insensitive. English text and unknown
    locales are returned unchanged.
    """
    if not text or locale == DEFAULT_LOCALE:
        return text or ""

    def _sub(match: re.Match) -> str:
        key = _PHRASE_BY_LOWER[match.group(0).lower()]
        return COMMON_PHRASES[key].get(locale, match.group(0))

    return _PHRASE_RE.sub(_sub, text)
