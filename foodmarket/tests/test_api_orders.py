"""
订单API集成测试
测试买家下单、取消，以及商家处理订单的完整流程
"""

import pytest

from .conftest import API, create_cart


@pytest.fixture
def placed_order(buyer_client, vendor_client, menu):
    """买家下单：A×2 (10.00) + B×1 (5.00)"""
    cart = create_cart(buyer_client, vendor_client.vendor["id"],
                       [(menu["A"]["id"], 2), (menu["B"]["id"], 1)])
    response = buyer_client.post(f"{API}/orders/buyer", json={"cartId": cart["id"]})
    assert response.status_code == 201, response.text
    return response.json()


class TestBuyerOrdersAPI:
    """买家订单"""

    def test_place_order(self, buyer_client, placed_order):
        """测试下单计算总价，购物车移出有效列表"""
        assert placed_order["totalPrice"] == 25.00
        assert placed_order["status"] == 0
        assert placed_order["buyerId"] == buyer_client.buyer["id"]
        assert [line["quantity"] for line in placed_order["cart"]["items"]] == [2, 1]

        assert buyer_client.get(f"{API}/carts").json() == []
        orders = buyer_client.get(f"{API}/orders/buyer").json()
        assert [o["id"] for o in orders] == [placed_order["id"]]

    def test_get_buyer_order(self, buyer_client, other_buyer_client, placed_order):
        url = f"{API}/orders/buyer/{placed_order['id']}"
        response = buyer_client.get(url)
        assert response.status_code == 200
        assert response.json()["cart"]["vendor"]["vendorName"] == "Noodle House"

        response = other_buyer_client.get(url)
        assert response.status_code == 401
        assert response.json()["error"] == "Buyer does not have access to the order"

    def test_place_order_foreign_cart(self, buyer_client, other_buyer_client, vendor_client, menu):
        cart = create_cart(buyer_client, vendor_client.vendor["id"], [(menu["A"]["id"], 1)])
        response = other_buyer_client.post(f"{API}/orders/buyer", json={"cartId": cart["id"]})
        assert response.status_code == 401
        assert len(buyer_client.get(f"{API}/carts").json()) == 1

    def test_new_cart_after_order(self, buyer_client, vendor_client, menu, placed_order):
        """测试下单后可以再次为同一商家创建购物车"""
        create_cart(buyer_client, vendor_client.vendor["id"], [(menu["C"]["id"], 1)])
        assert len(buyer_client.get(f"{API}/carts").json()) == 1

    def test_cancel_pending_order(self, buyer_client, placed_order, test_db):
        """测试取消待处理订单会删除订单和购物车"""
        response = buyer_client.patch(f"{API}/orders/buyer/{placed_order['id']}/cancel")
        assert response.status_code == 200

        assert buyer_client.get(f"{API}/orders/buyer").json() == []
        assert test_db.execute_one("SELECT COUNT(*) FROM orders")[0] == 0
        cart_id = placed_order["cart"]["id"]
        assert test_db.execute_one("SELECT COUNT(*) FROM carts WHERE id=?", [cart_id])[0] == 0

    def test_cancel_accepted_order(self, buyer_client, vendor_client, placed_order):
        vendor_client.patch(f"{API}/orders/vendor/{placed_order['id']}/process",
                            json={"isAccept": True})

        response = buyer_client.patch(f"{API}/orders/buyer/{placed_order['id']}/cancel")
        assert response.status_code == 403
        assert response.json()["error"] == "Order is not in 'pending' status"


class TestVendorOrdersAPI:
    """商家订单处理"""

    def test_accept_then_advance(self, vendor_client, placed_order):
        """测试接单后状态只能严格递增"""
        base = f"{API}/orders/vendor/{placed_order['id']}"

        accepted = vendor_client.patch(f"{base}/process", json={"isAccept": True})
        assert accepted.status_code == 200
        assert accepted.json()["status"] == 1

        same = vendor_client.patch(f"{base}/status", json={"status": 1})
        assert same.status_code == 422
        assert same.json()["error"] == "Invalid status"

        ready = vendor_client.patch(f"{base}/status", json={"status": 2})
        assert ready.status_code == 200
        assert ready.json()["status"] == 2

        backwards = vendor_client.patch(f"{base}/status", json={"status": 1})
        assert backwards.status_code == 422

        unknown = vendor_client.patch(f"{base}/status", json={"status": 9})
        assert unknown.status_code == 422

        completed = vendor_client.patch(f"{base}/status", json={"status": 3})
        assert completed.json()["status"] == 3

        # 已完成为终态
        cancelled = vendor_client.patch(f"{base}/status", json={"status": 4})
        assert cancelled.status_code == 422
        assert vendor_client.get(base).json()["status"] == 3

    def test_accepted_order_listed(self, vendor_client, placed_order):
        assert vendor_client.get(f"{API}/orders/vendor").json() == []
        vendor_client.patch(f"{API}/orders/vendor/{placed_order['id']}/process",
                            json={"isAccept": True})

        orders = vendor_client.get(f"{API}/orders/vendor").json()
        assert [o["id"] for o in orders] == [placed_order["id"]]
        response = vendor_client.get(f"{API}/orders/vendor/{placed_order['id']}")
        assert response.status_code == 200

    def test_reject_order(self, buyer_client, vendor_client, placed_order):
        """测试拒单后状态为已取消，不进入商家订单列表"""
        response = vendor_client.patch(f"{API}/orders/vendor/{placed_order['id']}/process",
                                       json={"isAccept": False})
        assert response.status_code == 200
        assert response.json()["status"] == 4

        assert vendor_client.get(f"{API}/orders/vendor").json() == []
        order = buyer_client.get(f"{API}/orders/buyer/{placed_order['id']}").json()
        assert order["status"] == 4

        status = vendor_client.patch(f"{API}/orders/vendor/{placed_order['id']}/status",
                                     json={"status": 4})
        assert status.status_code == 401

    def test_process_twice(self, vendor_client, placed_order):
        url = f"{API}/orders/vendor/{placed_order['id']}/process"
        vendor_client.patch(url, json={"isAccept": True})
        response = vendor_client.patch(url, json={"isAccept": False})
        assert response.status_code == 403
        assert response.json()["error"] == "Order is not in 'pending' status"

    def test_process_other_vendors_order(self, other_vendor_client, placed_order):
        response = other_vendor_client.patch(
            f"{API}/orders/vendor/{placed_order['id']}/process", json={"isAccept": True}
        )
        assert response.status_code == 401
        assert response.json()["error"] == "Vendor does not have access to the order"

    def test_process_unknown_order(self, vendor_client):
        response = vendor_client.patch(f"{API}/orders/vendor/{'d' * 32}/process",
                                       json={"isAccept": True})
        assert response.status_code == 404
        assert response.json()["error"] == "Order not found"

    def test_process_missing_flag(self, vendor_client, placed_order):
        response = vendor_client.patch(f"{API}/orders/vendor/{placed_order['id']}/process", json={})
        assert response.status_code == 400


class TestLogsAPI:
    """操作日志"""

    def test_order_lifecycle_logged(self, buyer_client, vendor_client, placed_order):
        """测试订单状态变化写入操作日志"""
        base = f"{API}/orders/vendor/{placed_order['id']}"
        vendor_client.patch(f"{base}/process", json={"isAccept": True})
        vendor_client.patch(f"{base}/status", json={"status": 2})

        response = buyer_client.get(f"{API}/logs/my")
        assert response.status_code == 200
        data = response.json()
        actions = [entry["action"] for entry in data["items"]]
        assert actions == ["order_status_updated", "order_accepted", "order_placed"]
        assert data["total"] == 3

        vendor_actions = [e["action"] for e in vendor_client.get(f"{API}/logs/my").json()["items"]]
        assert vendor_actions == ["order_status_updated", "order_accepted"]

    def test_logs_pagination(self, buyer_client, placed_order):
        response = buyer_client.get(f"{API}/logs/my", params={"page": 2, "size": 1})
        data = response.json()
        assert data["items"] == []
        assert data["pages"] == 1
