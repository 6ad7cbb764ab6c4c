"""Shared model primitives.

Provides:
- CamelModel: base model serialised with camelCase keys for the web client
- Score / OptionalScore: 0-100 integer scores coerced from loose LLM output
- Lenient field types (counts, numbers, text, flags) that turn null or
  malformed provider values into None or a field default instead of a
  validation error
"""

import math
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel


def coerce_score(value: Any) -> Optional[int]:
    """Coerce an LLM-reported score into an int clamped to 0-100.

    Providers report scores as ints, floats or numeric strings ("85", "85%").
    Anything that cannot be read as a number becomes None so callers can
    tell a missing score from a reported one.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().rstrip("%")
        try:
            value = float(value)
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    try:
        if not math.isfinite(value):
            return None
    except OverflowError:
        # ints beyond float range
        return 100 if value > 0 else 0
    return int(min(100, max(0, math.floor(value + 0.5))))


def _score_or_zero(value: Any) -> int:
    score = coerce_score(value)
    return 0 if score is None else score


def coerce_count(value: Any) -> Optional[int]:
    """Read a count such as 12400, "12,400" or 1.2e4 as an int, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.replace(",", "").strip()
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)


def _count_or_zero(value: Any) -> int:
    count = coerce_count(value)
    return 0 if count is None else count


def coerce_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _number_or_zero(value: Any) -> float:
    number = coerce_number(value)
    return 0.0 if number is None else number


def coerce_text(value: Any) -> Optional[str]:
    """Strings pass through, numbers are rendered, anything else is None."""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


_TRUE_WORDS = {"true", "yes", "y", "1"}
_FALSE_WORDS = {"false", "no", "n", "0"}


def coerce_flag(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return None


def coerce_object(value: Any) -> Any:
    """Keep mappings and models; drop strings, lists and other stray values."""
    return value if isinstance(value, (dict, BaseModel)) else None


def keyed_entries(value: Any, key: str) -> list:
    """Keep list entries that carry a non-blank string under `key`.

    Entries without their natural key cannot be identified or merged, so
    they are dropped rather than failing the whole reply.
    """
    if not isinstance(value, list):
        return []
    return [
        entry
        for entry in value
        if isinstance(entry, BaseModel)
        or (
            isinstance(entry, dict)
            and isinstance(entry.get(key), str)
            and entry[key].strip()
        )
    ]


def text_or(default: str) -> BeforeValidator:
    """Validator for str fields that fall back to `default` on null or junk."""

    def _coerce(value: Any) -> str:
        text = coerce_text(value)
        return default if text is None else text

    return BeforeValidator(_coerce)


def flag_or(default: bool) -> BeforeValidator:
    def _coerce(value: Any) -> bool:
        flag = coerce_flag(value)
        return default if flag is None else flag

    return BeforeValidator(_coerce)


OptionalScore = Annotated[Optional[int], BeforeValidator(coerce_score)]
Score = Annotated[int, BeforeValidator(_score_or_zero)]
OptionalCount = Annotated[Optional[int], BeforeValidator(coerce_count)]
OptionalNumber = Annotated[Optional[float], BeforeValidator(coerce_number)]
OptionalText = Annotated[Optional[str], BeforeValidator(coerce_text)]
OptionalFlag = Annotated[Optional[bool], BeforeValidator(coerce_flag)]
Count = Annotated[int, BeforeValidator(_count_or_zero)]
Number = Annotated[float, BeforeValidator(_number_or_zero)]


class CamelModel(BaseModel):
    """Base model accepting and emitting camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )

    def to_json_dict(self) -> dict:
        """Serialise with camelCase keys, dropping unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
