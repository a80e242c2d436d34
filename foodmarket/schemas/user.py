"""
买家、商家档案相关的请求模式
"""

from pydantic import Field
from typing import Optional
from ..models.base import CamelModel
from .common import RequiredStr


class BuyerRequest(CamelModel):
    """创建/更新买家档案"""
    buyer_name: RequiredStr = Field(description="买家名称")
    address: RequiredStr = Field(description="地址")
    phone_number: Optional[str] = Field(None, description="电话")


class VendorRequest(CamelModel):
    """创建/更新商家档案"""
    vendor_name: RequiredStr = Field(description="商家名称")
    address: RequiredStr = Field(description="地址")
    price_range: RequiredStr = Field(description="价位：$ / $$ / $$$")
    phone_number: Optional[str] = Field(None, description="电话")
    description: Optional[str] = Field(None, description="简介")


class SavedVendorRequest(CamelModel):
    """切换收藏商家"""
    vendor_id: RequiredStr = Field(description="商家ID")


class CuisineRequest(CamelModel):
    """切换商家菜系"""
    cuisine: RequiredStr = Field(description="菜系名称")
