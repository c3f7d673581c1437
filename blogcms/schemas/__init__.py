# blogcms/schemas/__init__.py

from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional, List, Literal

Role = Literal["admin", "author", "reader"]

# Входящие схемы намеренно "мягкие" (почти всё Optional[str]):
# длины и форматы проверяет blogcms.utils.validation, чтобы ответ был 400
# с человекочитаемым сообщением.

# =======================
# СХЕМЫ ДЛЯ ПОЛЬЗОВАТЕЛЕЙ
# =======================

class UserCreate(BaseModel):
    """
    Схема для создания пользователя (регистрация)
    """
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class UserLogin(BaseModel):
    """
    Схема для логина по email
    """
    email: Optional[str] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    """
    Схема ответа с инфо о пользователе (без пароля)
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: Role
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AuthorBrief(BaseModel):
    """Автор поста/комментария в публичной выдаче"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    avatar_url: Optional[str] = None


class AuthResponse(BaseModel):
    success: bool = True
    user: UserResponse
    token: str
    message: Optional[str] = None


class TokenClaims(BaseModel):
    """Содержимое проверенного токена"""
    id: int
    email: str
    role: Role


# =======================
# КАТЕГОРИИ И ТЕГИ
# =======================

class CategoryCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class CategoryBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str


class CategoryResponse(CategoryBrief):
    description: Optional[str] = None


class CategoryWithCount(CategoryResponse):
    post_count: int = 0


class TagCreate(BaseModel):
    name: Optional[str] = None


class TagResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str


class TagWithCount(TagResponse):
    post_count: int = 0


# ====================
# СХЕМЫ ДЛЯ ПУБЛИКАЦИИ
# ====================

class PostCreate(BaseModel):
    """Создание поста"""
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    category_id: Optional[int] = None
    status: Optional[str] = None
    tags: Optional[List[int]] = None


class PostUpdate(PostCreate):
    """Обновление поста. Учитываются только переданные поля."""
    pass


class PostResponse(BaseModel):
    """Ответ с информацией о посте"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    author_id: int
    title: str
    slug: str
    content: str
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    category_id: Optional[int] = None
    status: Literal["draft", "published"]
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    author: Optional[AuthorBrief] = None
    category: Optional[CategoryBrief] = None
    tags: List[TagResponse] = []


class PostPageResponse(BaseModel):
    """Страница ленты"""
    posts: List[PostResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


# ======================
# СХЕМЫ ДЛЯ КОММЕНТАРИЕВ
# ======================

class CommentCreate(BaseModel):
    """Создание / обновление комментария"""
    content: Optional[str] = None


class CommentWithAuthor(BaseModel):
    """Комментарий с инфо об авторе"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    post_id: int
    user_id: int
    content: str
    created_at: datetime
    updated_at: datetime
    author: Optional[AuthorBrief] = None


# ======================
# ОБЕРТКИ ОТВЕТОВ
# ======================

class MessageResponse(BaseModel):
    success: bool = True
    message: str


class PostEnvelope(BaseModel):
    success: bool = True
    data: PostResponse
    message: Optional[str] = None


class PostListEnvelope(BaseModel):
    success: bool = True
    data: List[PostResponse]
    count: int


class CommentEnvelope(BaseModel):
    success: bool = True
    data: CommentWithAuthor
    message: Optional[str] = None


class CommentListEnvelope(BaseModel):
    success: bool = True
    data: List[CommentWithAuthor]
    count: int


class CategoryEnvelope(BaseModel):
    success: bool = True
    data: CategoryResponse


class CategoryListEnvelope(BaseModel):
    success: bool = True
    data: List[CategoryWithCount]
    count: int


class TagEnvelope(BaseModel):
    success: bool = True
    data: TagResponse


class TagListEnvelope(BaseModel):
    success: bool = True
    data: List[TagWithCount]
    count: int
