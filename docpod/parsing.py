"""Shared parsing helpers for runtime, CLI, and config value normalization."""

from __future__ import annotations

from collections.abc import Iterable, Mapping


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text

    token = normalized.lower()
    if token in _TRUE_BOOLEAN_TOKENS:
        return True
    if token in _FALSE_BOOLEAN_TOKENS:
        return False
    return None


def parse_positive_float(value: object, field_name: str) -> float:
    """Parse a strictly positive float from numeric or textual input.

    Raises:
        ValueError: If the value is missing, non-numeric, or not greater than zero.
    """

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a positive number.")
    normalized = normalize_optional_string(value)
    if normalized is None:
        raise ValueError(f"`{field_name}` must be a positive number.")
    try:
        parsed = float(normalized)
    except ValueError as exc:
        raise ValueError(f"`{field_name}` must be a positive number.") from exc
    if parsed <= 0.0:
        raise ValueError(f"`{field_name}` must be a positive number.")
    return parsed


def parse_voice_assignments(entries: Iterable[str] | str | None) -> dict[str, str]:
    """Parse `Role=voice` assignments into a role-to-voice mapping.

    Accepts repeated CLI values (`["Host=aditya", "Guest=rahul"]`) or one
    comma-separated string (`"Host=aditya,Guest=rahul"`). Voice ids are
    lower-cased; role names keep their casing.

    Raises:
        ValueError: If an entry is missing the `=` separator or either side is blank.
    """

    if entries is None:
        return {}
    if isinstance(entries, str):
        raw_entries = entries.split(",")
    else:
        raw_entries = [part for entry in entries for part in entry.split(",")]

    assignments: dict[str, str] = {}
    for raw_entry in raw_entries:
        entry = normalize_optional_string(raw_entry)
        if entry is None:
            continue
        if "=" not in entry:
            raise ValueError(f"Voice assignment `{entry}` must use the `Role=voice` form.")
        role_part, voice_part = entry.split("=", 1)
        role = normalize_optional_string(role_part)
        voice = normalize_optional_string(voice_part)
        if role is None or voice is None:
            raise ValueError(f"Voice assignment `{entry}` must use the `Role=voice` form.")
        assignments[role] = voice.lower()
    return assignments


def normalize_string_map(raw: Mapping[object, object], field_name: str) -> dict[str, str]:
    """Normalize a mapping into non-empty string keys and values.

    Raises:
        ValueError: If any key or value is blank after trimming.
    """

    normalized: dict[str, str] = {}
    for raw_key, raw_value in raw.items():
        key_value = normalize_optional_string(raw_key)
        value_value = normalize_optional_string(raw_value)
        if key_value is None:
            raise ValueError(f"`{field_name}` contains a blank key.")
        if value_value is None:
            raise ValueError(f"`{field_name}` contains blank value for `{key_value}`.")
        normalized[key_value] = value_value
    return normalized
