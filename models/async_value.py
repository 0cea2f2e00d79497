from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class AsyncValue(BaseModel, Generic[T]):
    """
    Loading / error / data triple backing every async screen.

    Exactly one rendering applies: is_loading, error (with retryable flag),
    or data. Build instances through the classmethods.
    """
    is_loading: bool = False
    error: str | None = None
    retryable: bool = True
    value: T | None = None

    @classmethod
    def loading(cls) -> "AsyncValue[T]":
        return cls(is_loading=True)

    @classmethod
    def failure(cls, message: str, retryable: bool = True) -> "AsyncValue[T]":
        return cls(error=message, retryable=retryable)

    @classmethod
    def data(cls, value: T) -> "AsyncValue[T]":
        return cls(value=value)

    @property
    def has_error(self) -> bool:
        return self.error is not None

    @property
    def has_data(self) -> bool:
        return not self.is_loading and self.error is None
