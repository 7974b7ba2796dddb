"""Marketplace load test scenarios.

SellerUser keeps listing items and topping up their stock. ShopperJourney
walks a buyer through sign-up, browsing, cart and checkout. ContentionUser
hammers checkout on items that have exactly one unit in stock: for every
such item exactly one order may succeed and every other attempt must come
back as a 409 listing the item.
"""

import random
from collections import deque

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import address_data, item_data, sign_up_data, stock_level
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import SellerState, ShopperState

# Items listed with a single unit, shared by every ContentionUser in this process
CONTENDED_ITEMS: deque[str] = deque(maxlen=50)


def sign_up(client, state):
    with client.post("/users/signup", json=sign_up_data(), catch_response=True, name="POST /users/signup") as resp:
        if resp.status_code != 201:
            resp.failure(f"Sign up failed: {resp.status_code}: {extract_error_detail(resp)}")
            return False
        body = resp.json()
        state.user_id = body["user_id"]
        state.session_id = body["session_id"]
        return True


def add_address(client, state):
    with client.post(
        "/users/me/addresses",
        json=address_data(),
        headers=state.headers,
        catch_response=True,
        name="POST /users/me/addresses",
    ) as resp:
        if resp.status_code != 201:
            resp.failure(f"Add address failed: {resp.status_code}: {extract_error_detail(resp)}")
            return False
        state.address_id = resp.json()["address_id"]
        return True


def list_item(client, state, stock):
    with client.post("/items", json=item_data(), headers=state.headers, catch_response=True, name="POST /items") as resp:
        if resp.status_code != 201:
            resp.failure(f"List item failed: {resp.status_code}: {extract_error_detail(resp)}")
            return None
        item_id = resp.json()["item_id"]

    client.put(
        f"/items/{item_id}/stock",
        json={"quantity": stock},
        headers=state.headers,
        name="PUT /items/{id}/stock",
    )
    state.item_ids.append(item_id)
    return item_id


class SellerUser(HttpUser):
    """Lists items with stock, occasionally a single-unit item for contention runs."""

    wait_time = between(1, 3)
    weight = 1

    def on_start(self):
        self.state = SellerState()
        sign_up(self.client, self.state)

    @task(3)
    def list_stocked_item(self):
        list_item(self.client, self.state, stock_level())

    @task(1)
    def list_single_unit_item(self):
        item_id = list_item(self.client, self.state, 1)
        if item_id:
            CONTENDED_ITEMS.append(item_id)

    @task(1)
    def restock(self):
        if not self.state.item_ids:
            return
        item_id = random.choice(self.state.item_ids)
        self.client.put(
            f"/items/{item_id}/stock",
            json={"quantity": stock_level()},
            headers=self.state.headers,
            name="PUT /items/{id}/stock",
        )


class ShopperJourney(SequentialTaskSet):
    """Sign Up -> Add Address -> Browse -> Add To Cart -> Validate -> Checkout."""

    def on_start(self):
        self.state = ShopperState()
        if not (sign_up(self.client, self.state) and add_address(self.client, self.state)):
            self.interrupt()

    @task
    def browse(self):
        self.client.get("/items/search_suggestions", params={"q": "a"}, name="GET /items/search_suggestions")

    @task
    def fill_cart(self):
        candidates = list(CONTENDED_ITEMS)
        if not candidates:
            return
        for item_id in random.sample(candidates, k=min(2, len(candidates))):
            with self.client.post(
                "/cart/items",
                json={"item_id": item_id, "quantity": 1},
                headers=self.state.headers,
                catch_response=True,
                name="POST /cart/items",
            ) as resp:
                # 409 means someone else already bought the unit
                if resp.status_code in (201, 409):
                    resp.success()
                    if resp.status_code == 201:
                        self.state.cart_item_ids.append(item_id)
                else:
                    resp.failure(f"Add to cart failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def validate(self):
        with self.client.post(
            "/cart/validate", headers=self.state.headers, catch_response=True, name="POST /cart/validate"
        ) as resp:
            if resp.status_code in (200, 409):
                resp.success()
            else:
                resp.failure(f"Validate failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def checkout(self):
        with self.client.post(
            "/orders",
            json={"address_id": self.state.address_id},
            headers=self.state.headers,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.orders_placed += 1
                resp.success()
            elif resp.status_code == 409:
                self.state.checkouts_rejected += 1
                resp.success()
            else:
                resp.failure(f"Checkout failed: {resp.status_code}: {extract_error_detail(resp)}")
        self.state.cart_item_ids.clear()


class ShopperUser(HttpUser):
    wait_time = between(0.5, 2)
    weight = 3
    tasks = [ShopperJourney]


class ContentionUser(HttpUser):
    """Races other ContentionUsers for the same single-unit items."""

    wait_time = between(0.1, 0.5)
    weight = 5

    def on_start(self):
        self.state = ShopperState()
        sign_up(self.client, self.state)
        add_address(self.client, self.state)

    @task
    def grab_last_unit(self):
        if not CONTENDED_ITEMS:
            return
        item_id = random.choice(list(CONTENDED_ITEMS))

        self.client.post(
            "/cart/items",
            json={"item_id": item_id, "quantity": 1},
            headers=self.state.headers,
            name="[CONTENTION] POST /cart/items",
        )
        with self.client.post(
            "/orders",
            json={"address_id": self.state.address_id},
            headers=self.state.headers,
            catch_response=True,
            name="[CONTENTION] POST /orders",
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 409:
                items = resp.json().get("items", [])
                if items and item_id not in {line["item_id"] for line in items}:
                    resp.failure(f"Conflict did not list contended item {item_id}")
                else:
                    resp.success()
            else:
                resp.failure(f"Checkout failed: {resp.status_code}: {extract_error_detail(resp)}")
