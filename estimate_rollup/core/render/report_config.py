from __future__ import annotations

import string
from pathlib import Path
from typing import Any

import yaml


SUMMARY_FIELDS: tuple[str, ...] = ("lower", "higher", "complexity", "confidence")

LABEL_KEYS: tuple[str, ...] = (
    "summary",
    "col_name",
    "col_lower",
    "col_higher",
    "col_complexity",
    "col_confidence",
    "col_comment",
    "total",
    "gantt_title",
    "date_format",
    "axis_format",
)

DEFAULT_LABELS: dict[str, dict[str, str]] = {
    "en": {
        "summary": (
            "Preliminary projection puts the project's lower bound at `{lower}` effective "
            "working hours and the upper bound at `{higher}`, with an average complexity of "
            "`{complexity}/5` and an average estimate confidence of `{confidence}/5`."
        ),
        "col_name": "Title",
        "col_lower": "Lowest",
        "col_higher": "Highest",
        "col_complexity": "Complexity",
        "col_confidence": "Confidence",
        "col_comment": "Comment",
        "total": "Total",
        "gantt_title": "Gantt chart of projected schedule",
        "date_format": "YYYY-MM-DD",
        "axis_format": "w. %W",
    },
    "sv": {
        "summary": (
            "Preliminärt projiceras projektets lägre gräns till `{lower}` effektiva "
            "arbetstimmar och övre gräns till `{higher}`, med en genomsnittlig komplexitet på "
            "`{complexity}/5` och en genomsnittlig korrekthet av estimat på `{confidence}/5`."
        ),
        "col_name": "Rubrik",
        "col_lower": "Lägst",
        "col_higher": "Högst",
        "col_complexity": "Komplexitet",
        "col_confidence": "Korrekthet",
        "col_comment": "Kommentar",
        "total": "Total",
        "gantt_title": "Gantt Diagram över tidsprojektion",
        "date_format": "YYYY-MM-DD",
        "axis_format": "v. %W",
    },
}


class ReportConfigError(ValueError):
    pass


def load_label_file(path: str | Path) -> dict[str, str]:
    """Load label overrides from a YAML file.

    Format:
      <key>: "text"

    Only keys from LABEL_KEYS are accepted. The summary may only use the
    {lower}, {higher}, {complexity} and {confidence} placeholders.
    """
    p = Path(path)
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except UnicodeDecodeError as e:
        raise ReportConfigError(f"label file is not valid UTF-8: {e}") from e
    except yaml.YAMLError as e:
        raise ReportConfigError(f"label file is not valid YAML: {e}") from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ReportConfigError("label file must be a mapping of key -> string")

    out: dict[str, str] = {}
    for k, v in raw.items():
        if k not in LABEL_KEYS:
            raise ReportConfigError(
                f"unknown label key: {k} (choose from: {', '.join(LABEL_KEYS)})"
            )
        if not isinstance(v, str):
            raise ReportConfigError(f"label '{k}' must be a string")
        if k == "summary":
            _check_summary(v)
        out[k] = v
    return out


def merged_labels(locale: str = "en", overrides: dict[str, Any] | None = None) -> dict[str, str]:
    """Return the locale preset merged with optional overrides."""
    if locale not in DEFAULT_LABELS:
        raise ReportConfigError(
            f"unknown locale: {locale} (choose one of: {', '.join(sorted(DEFAULT_LABELS))})"
        )
    merged = dict(DEFAULT_LABELS[locale])
    if overrides:
        for k, v in overrides.items():
            merged[k] = v
    return merged


def load_and_merge(locale: str = "en", label_file: str | None = None) -> dict[str, str]:
    if not label_file:
        return merged_labels(locale)
    overrides = load_label_file(label_file)
    return merged_labels(locale, overrides)


def _check_summary(text: str) -> None:
    try:
        fields = [
            (name, spec, conv)
            for _, name, spec, conv in string.Formatter().parse(text)
            if name is not None
        ]
    except ValueError as e:
        raise ReportConfigError(f"label 'summary' is not a valid template: {e}") from e
    for name, spec, conv in fields:
        if name not in SUMMARY_FIELDS or spec or conv:
            raise ReportConfigError(
                f"label 'summary' has unsupported placeholder {{{name}}} "
                f"(choose from: {', '.join('{' + f + '}' for f in SUMMARY_FIELDS)})"
            )
