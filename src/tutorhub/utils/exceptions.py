class TutorHubException(Exception):
    """Base exception for the tutoring service"""

    status_code = 500

    def __init__(self, message: str = "Internal Server Error"):
        self.message = message
        super().__init__(self.message)


class BadRequestException(TutorHubException):
    """Exception for Bad Request (400)"""

    status_code = 400

    def __init__(self, message: str = "Bad Request"):
        super().__init__(message)


class UnauthorizedException(TutorHubException):
    """Exception for Unauthorized (401)"""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class AccessDeniedException(TutorHubException):
    """Exception for Forbidden (403)"""

    status_code = 403

    def __init__(self, message: str = "Access Denied"):
        super().__init__(message)


class ResourceNotFoundException(TutorHubException):
    """Exception for Not Found (404)"""

    status_code = 404

    def __init__(self, message: str = "Resource Not Found"):
        super().__init__(message)


class ConflictException(TutorHubException):
    """Exception for Conflict (409), e.g. duplicate email or slug"""

    status_code = 409

    def __init__(self, message: str = "Conflict"):
        super().__init__(message)
