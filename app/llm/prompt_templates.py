"""Prompt templates for the companion"""

from typing import Dict, Optional, Sequence

DEFAULT_LANGUAGE = "English"
DEFAULT_TONE = "neutral"

TONES = ("neutral", "friendly", "joyful", "sad", "angry", "stressed", "excited")


COMPANION_PROMPT = """You are Calm Companion, a friendly and supportive AI assistant.
Your goal is to help the user with {goal}.
The user's current tone is {tone}.
Please respond in a way that is consistent with this goal and tone.
The user is communicating in {language}, so please respond in {language}.

Conversation History:
{conversation_history}

User's message: "{message}"

Your response:"""


TONE_ANALYSIS_PROMPT = """Analyze the emotional tone of the following message, which is in {language}.
Categorize the tone as one of the following:
{tones}

Message: "{message}"

Tone:"""


LANGUAGE_DETECTION_PROMPT = """Detect the language of the following message.
Return only the language name (e.g., 'English', 'Spanish', 'French').

Message: "{message}"

Language:"""


def format_conversation_history(messages: Sequence[Dict[str, str]], max_messages: Optional[int] = None) -> str:
    """
    Format conversation history for prompt

    Args:
        messages: Chronological message dicts with 'role' and 'content'
        max_messages: Keep only the most recent N messages

    Returns:
        One ``role: content`` line per message
    """
    if not messages:
        return "No previous conversation."

    recent_messages = list(messages)
    if max_messages and len(recent_messages) > max_messages:
        recent_messages = recent_messages[-max_messages:]

    return "\n".join(f"{msg['role']}: {msg['content']}" for msg in recent_messages)


def build_companion_prompt(
    message: str,
    goal: str,
    tone: Optional[str],
    history: Sequence[Dict[str, str]],
    language: Optional[str],
    max_messages: Optional[int] = None
) -> str:
    """Single instruction block, then transcript, then the new message"""
    return COMPANION_PROMPT.format(
        goal=goal,
        tone=tone or DEFAULT_TONE,
        language=language or DEFAULT_LANGUAGE,
        conversation_history=format_conversation_history(history, max_messages),
        message=message
    )


def build_tone_prompt(message: str, language: Optional[str]) -> str:
    return TONE_ANALYSIS_PROMPT.format(
        language=language or DEFAULT_LANGUAGE,
        tones="\n".join(f"- {tone}" for tone in TONES),
        message=message
    )


def build_language_prompt(message: str) -> str:
    return LANGUAGE_DETECTION_PROMPT.format(message=message)
