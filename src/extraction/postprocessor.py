"""Field-specific rewriting of recognized text.

Rules are matched against the template field name, case-insensitively, in
order; the first matching rule's transform is applied. Unmatched fields are
returned trimmed.
"""

from collections.abc import Callable
from dataclasses import dataclass

from src.utils.logger import get_logger

from .address import normalize_address

logger = get_logger(__name__)


@dataclass(frozen=True)
class FieldRule:
    """A named ``(predicate, transform)`` pair over field names and text."""

    name: str
    matches: Callable[[str], bool]
    transform: Callable[[str], str]


def normalize_sex(text: str) -> str:
    """Reduce a sex field to ``F`` or ``M``.

    The first ``F`` or ``M`` in the upper-cased text wins; text containing
    neither is returned unchanged.
    """
    for char in text.upper():
        if char in ("F", "M"):
            return char
    return text


DEFAULT_RULES: tuple[FieldRule, ...] = (
    FieldRule(
        name="sex",
        matches=lambda field_name: field_name.lower() == "sex",
        transform=normalize_sex,
    ),
    FieldRule(
        name="address",
        matches=lambda field_name: "address" in field_name.lower(),
        transform=normalize_address,
    ),
)


class FieldPostProcessor:
    """Applies the first matching :class:`FieldRule` to a field's text.

    Args:
        rules: Rules evaluated top to bottom. Defaults to the sex and
            address rules.
    """

    def __init__(self, rules: tuple[FieldRule, ...] = DEFAULT_RULES) -> None:
        self.rules = rules

    def process(self, field_name: str, raw_text: str) -> str:
        """Rewrite recognized text according to the field's semantics.

        Args:
            field_name: Template field name, e.g. ``"Address"`` or ``"Sex"``.
            raw_text: Recognized text for the field.

        Returns:
            Post-processed text.
        """
        text = raw_text.strip()
        for rule in self.rules:
            if rule.matches(field_name):
                result = rule.transform(text)
                if result != text:
                    logger.debug(
                        "Rule '%s' rewrote %s: %r -> %r",
                        rule.name,
                        field_name,
                        text,
                        result,
                    )
                return result
        return text


_default_processor = FieldPostProcessor()


def postprocess(field_name: str, raw_text: str) -> str:
    """Post-process text with the default rule table."""
    return _default_processor.process(field_name, raw_text)
