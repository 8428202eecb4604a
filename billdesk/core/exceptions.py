# billdesk/core/exceptions.py
from fastapi import HTTPException, status


class Unauthorized(HTTPException):
    """No identity claims were attached to the request."""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(HTTPException):
    """Claims are present but the role is not permitted for the operation."""

    def __init__(self, detail: str = "Insufficient role"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
