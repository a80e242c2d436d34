"""
购物车API集成测试
"""

from .conftest import API, create_cart, create_menu_item


class TestCartsAPI:
    """购物车"""

    def test_create_and_get_cart(self, buyer_client, vendor_client, menu):
        """测试创建 A×2、B×1 后按顺序展开返回"""
        cart = create_cart(buyer_client, vendor_client.vendor["id"],
                           [(menu["A"]["id"], 2), (menu["B"]["id"], 1)])

        response = buyer_client.get(f"{API}/carts/cart/{cart['id']}")
        assert response.status_code == 200
        data = response.json()
        assert data["vendor"] == {"id": vendor_client.vendor["id"], "vendorName": "Noodle House"}
        assert data["savedForLater"] is False
        assert [(line["item"]["name"], line["quantity"]) for line in data["items"]] == [
            ("Beef Noodles", 2), ("Dumplings", 1)
        ]
        assert data["items"][0]["item"]["price"] == 10.00

    def test_list_carts(self, buyer_client, vendor_client, menu):
        create_cart(buyer_client, vendor_client.vendor["id"], [(menu["A"]["id"], 1)])
        response = buyer_client.get(f"{API}/carts")
        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_second_cart_same_vendor(self, buyer_client, vendor_client, menu):
        """测试同一商家只能有一个购物车"""
        vendor_id = vendor_client.vendor["id"]
        create_cart(buyer_client, vendor_id, [(menu["A"]["id"], 1)])

        response = buyer_client.post(f"{API}/carts/cart", json={
            "vendorId": vendor_id, "items": [{"itemId": menu["B"]["id"], "quantity": 1}]
        })
        assert response.status_code == 409
        assert response.json()["error"] == "Cart for this vendor already exists"
        assert len(buyer_client.get(f"{API}/carts").json()) == 1

    def test_other_buyer_cannot_see_cart(self, buyer_client, other_buyer_client,
                                         vendor_client, menu):
        """测试其他买家访问购物车返回401且不泄露内容"""
        cart = create_cart(buyer_client, vendor_client.vendor["id"], [(menu["A"]["id"], 2)])

        response = other_buyer_client.get(f"{API}/carts/cart/{cart['id']}")
        assert response.status_code == 401
        assert response.json() == {
            "error": "Buyer does not have access to the cart",
            "method": "GET",
            "path": f"{API}/carts/cart/{cart['id']}",
        }

        response = other_buyer_client.delete(f"{API}/carts/cart/{cart['id']}")
        assert response.status_code == 401
        assert buyer_client.get(f"{API}/carts/cart/{cart['id']}").status_code == 200

    def test_unknown_cart_same_as_not_owned(self, buyer_client):
        response = buyer_client.get(f"{API}/carts/cart/{'b' * 32}")
        assert response.status_code == 401
        response = buyer_client.get(f"{API}/carts/cart/nope")
        assert response.status_code == 422

    def test_create_cart_validation(self, buyer_client, vendor_client, other_vendor_client, menu):
        """测试创建购物车的各项校验"""
        vendor_id = vendor_client.vendor["id"]
        item_a = menu["A"]["id"]

        def post(payload):
            return buyer_client.post(f"{API}/carts/cart", json=payload)

        assert post({"vendorId": "bad", "items": [{"itemId": item_a, "quantity": 1}]}).status_code == 422
        assert post({"vendorId": "c" * 32, "items": [{"itemId": item_a, "quantity": 1}]}).status_code == 404
        assert post({"vendorId": vendor_id, "items": []}).status_code == 400
        assert post({"vendorId": vendor_id}).status_code == 400

        duplicate = post({"vendorId": vendor_id, "items": [
            {"itemId": item_a, "quantity": 1}, {"itemId": item_a, "quantity": 2}
        ]})
        assert duplicate.status_code == 403
        assert duplicate.json()["error"] == "Duplicate items are not allowed"

        not_on_menu = post({"vendorId": other_vendor_client.vendor["id"],
                            "items": [{"itemId": item_a, "quantity": 1}]})
        assert not_on_menu.status_code == 401
        assert not_on_menu.json()["error"] == "Vendor does not have access to the menu item"

        zero = post({"vendorId": vendor_id, "items": [{"itemId": item_a, "quantity": 0}]})
        assert zero.status_code == 422
        assert zero.json()["error"] == "Invalid quantity"

        assert buyer_client.get(f"{API}/carts").json() == []

    def test_replace_items(self, buyer_client, vendor_client, menu):
        cart = create_cart(buyer_client, vendor_client.vendor["id"], [(menu["A"]["id"], 1)])

        response = buyer_client.put(f"{API}/carts/cart/{cart['id']}", json={
            "items": [{"itemId": menu["C"]["id"], "quantity": 3}]
        })
        assert response.status_code == 200
        assert [(line["item"]["name"], line["quantity"]) for line in response.json()["items"]] == [("Tea", 3)]

    def test_upsert_item(self, buyer_client, vendor_client, menu):
        """测试单个菜品的新增、修改和移除"""
        cart = create_cart(buyer_client, vendor_client.vendor["id"], [(menu["A"]["id"], 1)])
        url = f"{API}/carts/cart/{cart['id']}/item"

        added = buyer_client.patch(url, json={"itemId": menu["B"]["id"], "quantity": 2})
        assert added.status_code == 200
        assert [line["quantity"] for line in added.json()["items"]] == [1, 2]

        updated = buyer_client.patch(url, json={"itemId": menu["A"]["id"], "quantity": 5})
        assert [line["quantity"] for line in updated.json()["items"]] == [5, 2]

        removed = buyer_client.patch(url, json={"itemId": menu["A"]["id"], "quantity": 0})
        assert [line["item"]["name"] for line in removed.json()["items"]] == ["Dumplings"]

        unchanged = buyer_client.patch(url, json={"itemId": menu["C"]["id"], "quantity": 0})
        assert unchanged.status_code == 200
        assert len(unchanged.json()["items"]) == 1

        negative = buyer_client.patch(url, json={"itemId": menu["B"]["id"], "quantity": -1})
        assert negative.status_code == 422

    def test_remove_last_item_deletes_cart(self, buyer_client, vendor_client, menu):
        """测试移除最后一个菜品后购物车被删除"""
        cart = create_cart(buyer_client, vendor_client.vendor["id"], [(menu["A"]["id"], 1)])

        response = buyer_client.patch(
            f"{API}/carts/cart/{cart['id']}/item",
            json={"itemId": menu["A"]["id"], "quantity": 0}
        )
        assert response.status_code == 200
        assert "message" in response.json()
        assert buyer_client.get(f"{API}/carts").json() == []
        assert buyer_client.get(f"{API}/carts/cart/{cart['id']}").status_code == 401

    def test_upsert_item_not_on_menu(self, buyer_client, vendor_client, other_vendor_client, menu):
        foreign = create_menu_item(other_vendor_client, "Taco", 3.0)
        cart = create_cart(buyer_client, vendor_client.vendor["id"], [(menu["A"]["id"], 1)])

        response = buyer_client.patch(
            f"{API}/carts/cart/{cart['id']}/item",
            json={"itemId": foreign["id"], "quantity": 1}
        )
        assert response.status_code == 401

    def test_toggle_saved_for_later(self, buyer_client, vendor_client, menu):
        cart = create_cart(buyer_client, vendor_client.vendor["id"], [(menu["A"]["id"], 1)])
        url = f"{API}/carts/cart/{cart['id']}/savedForLater"

        assert buyer_client.patch(url).json()["savedForLater"] is True
        assert buyer_client.patch(url).json()["savedForLater"] is False

    def test_empty_cart(self, buyer_client, vendor_client, menu, test_db):
        cart = create_cart(buyer_client, vendor_client.vendor["id"], [(menu["A"]["id"], 1)])

        response = buyer_client.delete(f"{API}/carts/cart/{cart['id']}")
        assert response.status_code == 200
        assert buyer_client.get(f"{API}/carts").json() == []
        assert test_db.execute_one("SELECT COUNT(*) FROM cart_items")[0] == 0

    def test_empty_all_carts(self, buyer_client, vendor_client, other_vendor_client, menu):
        taco = create_menu_item(other_vendor_client, "Taco", 3.0)
        create_cart(buyer_client, vendor_client.vendor["id"], [(menu["A"]["id"], 1)])
        create_cart(buyer_client, other_vendor_client.vendor["id"], [(taco["id"], 4)])
        assert len(buyer_client.get(f"{API}/carts").json()) == 2

        response = buyer_client.delete(f"{API}/carts")
        assert response.status_code == 200
        assert buyer_client.get(f"{API}/carts").json() == []

    def test_carts_require_buyer(self, vendor_client):
        response = vendor_client.get(f"{API}/carts")
        assert response.status_code == 401
        assert response.json()["error"] == "User does not have a buyer profile"
