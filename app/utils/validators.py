"""Input validation shared by the store and the chat service"""

import re
from typing import Optional

from app.exceptions import ValidationException, InvalidIdException, InvalidPaginationException

GOALS = (
    "emotional-support",
    "stress-relief",
    "polite-greetings",
    "kind-disagreement",
    "respectful-questions",
)
CUSTOM_GOAL_PREFIX = "custom:"
CUSTOM_GOAL_MAX_LENGTH = 100

MESSAGE_MAX_LENGTH = 1000
MAX_PAGE_SIZE = 50

OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")
LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")

ROLES = ("user", "assistant")


def validate_goal(goal: Optional[str]) -> str:
    """
    Return the normalised goal or raise ValidationException

    Accepts one of GOALS, or a custom goal written as ``custom:<text>``.
    """
    goal = (goal or "").strip()
    if goal in GOALS:
        return goal

    if goal.startswith(CUSTOM_GOAL_PREFIX):
        text = goal[len(CUSTOM_GOAL_PREFIX):].strip()
        if 0 < len(text) <= CUSTOM_GOAL_MAX_LENGTH:
            return f"{CUSTOM_GOAL_PREFIX}{text}"

    raise ValidationException(
        "Invalid goal specified",
        details=[{"field": "goal", "msg": "Invalid goal specified", "value": goal}]
    )


def validate_message_content(content: Optional[str]) -> str:
    """Trim and bound a chat message"""
    content = (content or "").strip()
    if not 1 <= len(content) <= MESSAGE_MAX_LENGTH:
        raise ValidationException(
            "Validation failed",
            details=[{
                "field": "message",
                "msg": f"Message must be between 1 and {MESSAGE_MAX_LENGTH} characters"
            }]
        )
    return content


def validate_conversation_id(conversation_id: str) -> str:
    """Reject ids that cannot exist before touching the store"""
    if not conversation_id or not OBJECT_ID_PATTERN.match(conversation_id):
        raise InvalidIdException("Invalid conversation ID format")
    return conversation_id.lower()


def validate_pagination(page: int, page_size: int) -> None:
    """page >= 1 and 1 <= page_size <= MAX_PAGE_SIZE"""
    if page < 1 or not 1 <= page_size <= MAX_PAGE_SIZE:
        raise InvalidPaginationException("Invalid pagination parameters")


def parse_query_int(raw: Optional[str], default: int) -> int:
    """
    Leading integer of a query string value

    Missing, non-numeric and zero values fall back to ``default``; range
    checks are left to validate_pagination.
    """
    match = LEADING_INT_PATTERN.match(raw or "")
    value = int(match.group(1)) if match else 0
    return value or default


def validate_role(role: str) -> str:
    if role not in ROLES:
        raise ValidationException(f"Invalid message role: {role}")
    return role
