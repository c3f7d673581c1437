# blogcms/services/results.py

"""
Результат чтения из БД, в котором "ничего не нашлось" и "БД недоступна"
различаются явно.
"""

from dataclasses import dataclass, field
from math import ceil
from typing import Generic, List, Optional, TypeVar

from blogcms.models import Post

T = TypeVar("T")


@dataclass
class QueryResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "QueryResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> "QueryResult[T]":
        return cls(error=error)


@dataclass
class PostPage:
    posts: List[Post] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 12

    @property
    def total_pages(self) -> int:
        return ceil(self.total / self.page_size) if self.page_size else 0

    def as_dict(self) -> dict:
        return {
            "posts": self.posts,
            "total": self.total,
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
        }
