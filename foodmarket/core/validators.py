"""
通用校验辅助函数
"""

import re
from typing import Any, Iterable

from .exceptions import InvalidFieldError, MissingFieldError

ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")

PRICE_RANGES = ("$", "$$", "$$$")


def is_valid_id(value: Any) -> bool:
    """是否为合法的文档ID"""
    return isinstance(value, str) and ID_PATTERN.match(value) is not None


def assert_valid_id(value: Any, item: str) -> str:
    """ID格式非法时抛出 InvalidFieldError"""
    if not is_valid_id(value):
        raise InvalidFieldError(f"{item} id")
    return value


def assert_price_range(value: str) -> str:
    if value not in PRICE_RANGES:
        raise InvalidFieldError("price range")
    return value


def assert_defined(*values: Any):
    """任一值为空（None 或空字符串）时抛出 MissingFieldError"""
    for value in values:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise MissingFieldError()


def has_duplicates(values: Iterable[Any]) -> bool:
    values = list(values)
    return len(values) != len(set(values))
