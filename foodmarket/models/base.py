"""
基础数据模型
定义通用的模型基类：字段在接口中统一使用 camelCase
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any


class CamelModel(BaseModel):
    """接口模型基类，序列化为 camelCase，同时接受 snake_case 输入"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BaseEntity(CamelModel):
    """基础实体模型"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )

    id: str = Field(..., description="文档ID")


class PaginationParams(BaseModel):
    """分页参数"""
    page: int = Field(default=1, ge=1, description="页码")
    size: int = Field(default=10, ge=1, le=100, description="每页大小")

    @property
    def offset(self) -> int:
        """计算偏移量"""
        return (self.page - 1) * self.size


class PaginatedResponse(CamelModel):
    """分页响应"""
    items: list[Any]
    total: int
    page: int
    size: int
    pages: int

    @classmethod
    def create(cls, items: list, total: int, pagination: PaginationParams):
        """创建分页响应"""
        pages = (total + pagination.size - 1) // pagination.size
        return cls(
            items=items,
            total=total,
            page=pagination.page,
            size=pagination.size,
            pages=pages
        )
