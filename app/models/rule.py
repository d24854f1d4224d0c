# app/models/rule.py

from typing import Annotated, Any, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError


# ============================================
# Matching Rules
# ============================================

RuleKind = Literal["exact", "fuzzy", "range"]


class ExactRule(BaseModel):
    """Strict equality; `amount` fields honour an absolute tolerance."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(min_length=1)
    type: Literal["exact"] = "exact"
    tolerance: Optional[float] = Field(default=None, ge=0)


class FuzzyRule(BaseModel):
    """Case-insensitive Levenshtein similarity against a threshold."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(min_length=1)
    type: Literal["fuzzy"] = "fuzzy"
    threshold: Optional[float] = Field(default=None, ge=0, le=1)


class RangeRule(BaseModel):
    """Date proximity within a window of `days`."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(min_length=1)
    type: Literal["range"] = "range"
    days: float = Field(gt=0)


MatchingRule = Annotated[
    Union[ExactRule, FuzzyRule, RangeRule],
    Field(discriminator="type"),
]

_rule_set_adapter = TypeAdapter(list[MatchingRule])


def parse_rules(raw: list[dict[str, Any]]) -> list[MatchingRule]:
    """
    Build a rule set from plain dicts (e.g. a job's stored JSON).

    Raises pydantic.ValidationError on unknown kinds or missing parameters.
    """
    return _rule_set_adapter.validate_python(raw)


class RuleError(BaseModel):
    """One problem found in a submitted rule set."""

    index: Optional[int] = None
    field: Optional[str] = None
    message: str


def validate_rules(raw: list[Any]) -> tuple[list[MatchingRule], list[RuleError]]:
    """
    Parse a rule set, collecting errors instead of raising.

    Returns (rules, errors); rules is empty whenever errors is not.
    """
    try:
        return parse_rules(raw), []
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = error.get("loc", ())
            index = loc[0] if loc and isinstance(loc[0], int) else None
            field = None
            if index is not None and isinstance(raw[index], dict):
                field = raw[index].get("field")
            errors.append(RuleError(index=index, field=field, message=error["msg"]))
        return [], errors
