"""
外卖点餐平台后端服务
"""

__version__ = "1.0.0"
