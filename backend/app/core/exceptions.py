import logging
from fastapi import HTTPException, status

logger = logging.getLogger(__name__)

class BaseAppException(Exception):
    """Base exception for application"""
    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

class AuthenticationException(BaseAppException):
    """Raised when the bearer token is missing or invalid"""
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED)

class ValidationException(BaseAppException):
    """Raised when request data is malformed or breaks a business rule"""
    def __init__(self, message: str = "Invalid request"):
        super().__init__(message, status.HTTP_400_BAD_REQUEST)

class ForbiddenException(BaseAppException):
    """Raised when the caller is not allowed to act on a resource"""
    def __init__(self, message: str = "Access denied"):
        super().__init__(message, status.HTTP_403_FORBIDDEN)

class NotFoundException(BaseAppException):
    """Raised when a resource is absent or owned by someone else"""
    def __init__(self, message: str = "Not found"):
        super().__init__(message, status.HTTP_404_NOT_FOUND)

class UpstreamServiceException(BaseAppException):
    """Raised when an external collaborator fails"""
    def __init__(self, message: str = "Upstream service error"):
        super().__init__(message, status.HTTP_502_BAD_GATEWAY)

# Friendships

class FriendshipNotFoundException(NotFoundException):
    def __init__(self, message: str = "Friendship not found"):
        super().__init__(message)

class FriendRequestException(ValidationException):
    """Raised when a friend request cannot be created or answered"""

class NotFriendsException(ForbiddenException):
    def __init__(self, message: str = "You are not friends with this user"):
        super().__init__(message)

# Watchlists

class WatchlistNotFoundException(NotFoundException):
    def __init__(self, message: str = "Watchlist not found or access denied"):
        super().__init__(message)

class WatchlistNameTakenException(ValidationException):
    def __init__(self, message: str = "Watchlist with this name already exists"):
        super().__init__(message)

class DefaultWatchlistLockedException(ValidationException):
    """Raised on attempts to rename or delete the default watchlist"""

class MovieNotFoundException(NotFoundException):
    def __init__(self, message: str = "Movie not found in this watchlist"):
        super().__init__(message)

# Favourite actors

class ActorNotFoundException(NotFoundException):
    def __init__(self, message: str = "Actor not found in favorites"):
        super().__init__(message)


def handle_exception(e: Exception, fallback_message: str = "An internal server error occurred") -> HTTPException:
    """Convert exceptions raised inside a route into HTTPException"""
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, BaseAppException):
        return HTTPException(
            status_code=e.status_code,
            detail=e.message
        )
    logger.error(f"{fallback_message}: {str(e)}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=fallback_message
    )
