"""API response envelope."""

from typing import TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse[T](BaseModel):
    """Successful responses are wrapped as ``{code, message, data}``.

    Errors do not use this envelope; see ``exceptions.py``.
    """

    code: int = 200
    message: str = "Operation successful"
    data: T | None = None

    @classmethod
    def success(
        cls,
        data: T = None,
        message: str = "Operation successful",
        code: int = 200,
    ) -> "ApiResponse[T]":
        return cls(code=code, message=message, data=data)
