"""
测试配置文件
提供测试所需的fixtures和辅助函数

每个测试使用独立的内存数据库和应用实例；
TestClient 会保存会话 Cookie，不同身份的用户使用不同的客户端
"""

import threading

import pytest
from fastapi.testclient import TestClient

from foodmarket.app import create_app
from foodmarket.config import TestingSettings
from foodmarket.core.database import DatabaseManager
from foodmarket.core.security import SecurityManager
from foodmarket.services import BuyerService, MenuService, UserService, VendorService

API = "/api"


# ---- 接口辅助函数 ----

def sign_up(client: TestClient, email: str, password: str = "password123") -> dict:
    """注册并在客户端中建立会话"""
    response = client.post(f"{API}/users/signup", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()


def create_buyer(client: TestClient, buyer_name: str = "Alice", address: str = "1 Main St") -> dict:
    response = client.post(f"{API}/buyers", json={"buyerName": buyer_name, "address": address})
    assert response.status_code == 201, response.text
    return response.json()


def create_vendor(client: TestClient, vendor_name: str = "Noodle House",
                  price_range: str = "$$") -> dict:
    response = client.post(f"{API}/vendors", json={
        "vendorName": vendor_name,
        "address": "2 Market St",
        "priceRange": price_range,
        "description": "Hand-pulled noodles",
    })
    assert response.status_code == 201, response.text
    return response.json()


def create_menu_item(client: TestClient, name: str, price: float,
                     category: str = "Main", availability: bool = True) -> dict:
    response = client.post(f"{API}/menus/item", json={
        "name": name,
        "price": price,
        "category": category,
        "availability": availability,
    })
    assert response.status_code == 201, response.text
    return response.json()


def create_cart(client: TestClient, vendor_id: str, items: list) -> dict:
    """items: [(菜品ID, 数量), ...]"""
    response = client.post(f"{API}/carts/cart", json={
        "vendorId": vendor_id,
        "items": [{"itemId": item_id, "quantity": qty} for item_id, qty in items],
    })
    assert response.status_code == 201, response.text
    return response.json()


def run_concurrently(func, times: int = 2):
    """在多个线程中同时调用 func，返回 (成功结果列表, 异常列表)"""
    results, errors = [], []
    start = threading.Event()

    def worker():
        start.wait()
        try:
            results.append(func())
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(times)]
    for thread in threads:
        thread.start()
    start.set()
    for thread in threads:
        thread.join(timeout=10)
    return results, errors


# ---- 基础 fixtures ----

@pytest.fixture
def test_settings():
    """测试配置"""
    return TestingSettings()


@pytest.fixture
def test_db():
    """测试数据库（内存）"""
    db_manager = DatabaseManager("duckdb://:memory:")
    db_manager.init_database()
    yield db_manager
    db_manager.close()


@pytest.fixture
def app_instance(test_settings, test_db):
    """测试应用"""
    return create_app(test_settings, test_db)


@pytest.fixture
def client(app_instance):
    """测试客户端（未登录）"""
    with TestClient(app_instance) as test_client:
        yield test_client


@pytest.fixture
def make_client(app_instance):
    """创建共享同一应用、各自保存会话的客户端"""
    def _make():
        return TestClient(app_instance)
    return _make


# ---- 身份 fixtures ----

@pytest.fixture
def vendor_client(make_client):
    """已创建商家档案的客户端"""
    vendor_client = make_client()
    sign_up(vendor_client, "vendor@example.com")
    vendor_client.vendor = create_vendor(vendor_client)
    return vendor_client


@pytest.fixture
def menu(vendor_client):
    """商家菜单：A 10.00，B 5.00，C 8.50"""
    return {
        "A": create_menu_item(vendor_client, "Beef Noodles", 10.00),
        "B": create_menu_item(vendor_client, "Dumplings", 5.00, category="Side"),
        "C": create_menu_item(vendor_client, "Tea", 8.50, category="Drink"),
    }


@pytest.fixture
def buyer_client(make_client):
    """已创建买家档案的客户端"""
    buyer_client = make_client()
    sign_up(buyer_client, "buyer@example.com")
    buyer_client.buyer = create_buyer(buyer_client)
    return buyer_client


@pytest.fixture
def other_buyer_client(make_client):
    other = make_client()
    sign_up(other, "other-buyer@example.com")
    other.buyer = create_buyer(other, buyer_name="Bob")
    return other


@pytest.fixture
def other_vendor_client(make_client):
    other = make_client()
    sign_up(other, "other-vendor@example.com")
    other.vendor = create_vendor(other, vendor_name="Taco Stand", price_range="$")
    return other


# ---- 服务层 fixtures ----

@pytest.fixture
def security():
    return SecurityManager(rounds=4)


@pytest.fixture
def seeded(test_db, security):
    """
    直接通过服务层准备数据：一个买家、一个商家及其菜单

    Returns:
        dict: buyer_id、vendor_id、item_a、item_b
    """
    users = UserService(test_db, security)
    buyer_user = users.sign_up("svc-buyer@example.com", "password123")
    vendor_user = users.sign_up("svc-vendor@example.com", "password123")

    buyer = BuyerService(test_db).create_buyer(buyer_user.id, "Alice", "1 Main St")
    vendor = VendorService(test_db).create_vendor(vendor_user.id, "Noodle House", "2 Market St", "$$")

    menu_service = MenuService(test_db)
    item_a = menu_service.create_menu_item(vendor.id, "Beef Noodles", 10.00, "Main", True)
    item_b = menu_service.create_menu_item(vendor.id, "Dumplings", 5.00, "Side", True)

    return {
        "buyer_id": buyer.id,
        "vendor_id": vendor.id,
        "item_a": item_a.id,
        "item_b": item_b.id,
    }
