"""
Política de paginación común a conversaciones y mensajes.

``page`` empieza en 1. Una página más allá de la última devuelve una lista
vacía (no es un error), pero ``page < 1`` o ``limit < 1`` sí lo son.
"""
import math
from typing import List, Sequence, Tuple, TypeVar

from pydantic import BaseModel

from .errors import ValidationError

T = TypeVar("T")


class PageInfo(BaseModel):
    current: int
    pages: int
    total: int


def validate_page(page: int, limit: int) -> None:
    if page < 1:
        raise ValidationError("page debe ser >= 1")
    if limit < 1:
        raise ValidationError("limit debe ser >= 1")


def skip_for(page: int, limit: int) -> int:
    validate_page(page, limit)
    return (page - 1) * limit


def page_info(page: int, limit: int, total: int) -> PageInfo:
    return PageInfo(current=page, pages=math.ceil(total / limit), total=total)


def paginate(items: Sequence[T], page: int, limit: int) -> Tuple[List[T], PageInfo]:
    start = skip_for(page, limit)
    return list(items[start:start + limit]), page_info(page, limit, len(items))
