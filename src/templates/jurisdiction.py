"""Resolve a jurisdiction name from free-form text.

Vision models asked for the issuing state sometimes answer with a sentence
instead of a name; this picks the state name back out of such answers.
"""

from src.utils.logger import get_logger

logger = get_logger(__name__)

US_STATES: tuple[str, ...] = (
    "Alabama", "Alaska", "Arizona", "Arkansas", "California", "Colorado",
    "Connecticut", "Delaware", "Florida", "Georgia", "Hawaii", "Idaho",
    "Illinois", "Indiana", "Iowa", "Kansas", "Kentucky", "Louisiana", "Maine",
    "Maryland", "Massachusetts", "Michigan", "Minnesota", "Mississippi",
    "Missouri", "Montana", "Nebraska", "Nevada", "New Hampshire", "New Jersey",
    "New Mexico", "New York", "North Carolina", "North Dakota", "Ohio",
    "Oklahoma", "Oregon", "Pennsylvania", "Rhode Island", "South Carolina",
    "South Dakota", "Tennessee", "Texas", "Utah", "Vermont", "Virginia",
    "Washington", "West Virginia", "Wisconsin", "Wyoming",
)

# Answers longer than this are treated as prose rather than a bare name.
MAX_NAME_LENGTH = 20


def resolve_jurisdiction(answer: str | None) -> str | None:
    """Extract a jurisdiction name from a model answer or user input.

    Args:
        answer: Raw text, e.g. ``"California"`` or
            ``"This license was issued by the state of Ohio."``.

    Returns:
        The jurisdiction name, or ``None`` when it cannot be identified.
    """
    text = (answer or "").strip()
    if not text or text.lower() == "unknown":
        return None
    if len(text) <= MAX_NAME_LENGTH:
        return text

    lowered = text.lower()
    matches = [name for name in US_STATES if name.lower() in lowered]
    if not matches:
        logger.info("No state name found in answer: %.60s", text)
        return None
    # "West Virginia" also contains "Virginia"
    return max(matches, key=len)
