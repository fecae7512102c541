"""Custom exception classes"""

from typing import Any, Optional


class ChatbotException(Exception):
    """Base exception for chatbot"""

    status_code = 500
    code = "SERVER_ERROR"

    def __init__(self, message: str = "", details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationException(ChatbotException):
    """Validation errors"""
    status_code = 400
    code = "VALIDATION_ERROR"


class InvalidPaginationException(ValidationException):
    """Page or page size out of range"""
    code = "INVALID_PAGINATION"


class InvalidIdException(ValidationException):
    """Malformed conversation identifier"""
    code = "INVALID_ID"


class AuthenticationException(ChatbotException):
    """Missing, invalid or expired credentials"""
    status_code = 401
    code = "AUTH_TOKEN_INVALID"

    def __init__(self, message: str = "Token is not valid", code: Optional[str] = None):
        super().__init__(message)
        if code:
            self.code = code


class UserExistsException(ValidationException):
    """Registration with an email that is already taken"""
    code = "USER_EXISTS"


class InvalidCredentialsException(ValidationException):
    """Unknown email or wrong password"""
    code = "INVALID_CREDENTIALS"


class NotFoundException(ChatbotException):
    """Requested record does not exist"""
    status_code = 404
    code = "NOT_FOUND"


class ConversationNotFoundException(NotFoundException):
    """Conversation absent or owned by somebody else"""
    code = "CONVERSATION_NOT_FOUND"

    def __init__(self, message: str = "Conversation not found"):
        super().__init__(message)


class DatabaseException(ChatbotException):
    """Database operation errors"""
    pass


class ExternalAPIException(ChatbotException):
    """External API errors (OpenAI, Gemini, Anthropic)"""
    status_code = 502
    code = "EXTERNAL_API_ERROR"


class ProviderException(ExternalAPIException):
    """A single AI provider failed to generate a reply"""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.reason = message
