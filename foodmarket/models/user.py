"""
用户及买家、商家档案数据模型
"""

from pydantic import Field
from typing import List, Optional
from .base import BaseEntity


class User(BaseEntity):
    """用户（密码哈希不会出现在模型中）"""
    email: Optional[str] = Field(None, description="登录邮箱")
    google_id: Optional[str] = Field(None, description="Google 账户ID")
    github_id: Optional[str] = Field(None, description="GitHub 账户ID")
    buyer_id: Optional[str] = Field(None, description="买家档案ID")
    vendor_id: Optional[str] = Field(None, description="商家档案ID")


class Buyer(BaseEntity):
    """买家档案"""
    buyer_name: str = Field(..., description="买家名称")
    address: str = Field(..., description="地址")
    phone_number: Optional[str] = Field(None, description="电话")


class Vendor(BaseEntity):
    """商家档案"""
    vendor_name: str = Field(..., description="商家名称（唯一）")
    address: str = Field(..., description="地址")
    price_range: str = Field(..., description="价位：$ / $$ / $$$")
    phone_number: Optional[str] = Field(None, description="电话")
    description: Optional[str] = Field(None, description="简介")
    cuisine_types: List[str] = Field(default_factory=list, description="菜系")
