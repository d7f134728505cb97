"""Ordering load test scenarios.

Order placement against the live catalogue, followed by status changes,
and a contention scenario in which many buyers race for the same
low-stock product to exercise the clamped stock decrement.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import ORDER_STATUSES, order_payload, product_form
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import OrderState


class OrderLifecycleJourney(SequentialTaskSet):
    """Browse -> Place order -> Advance status -> Read back."""

    def on_start(self):
        self.state = OrderState()

    @task
    def pick_products(self):
        with self.client.get("/api/products", catch_response=True, name="GET /api/products") as resp:
            products = resp.json() if resp.status_code == 200 else []
            if not products:
                resp.failure("No products to order, seed the catalogue first")
                self.interrupt()
                return
            self.state.products = random.sample(products, k=min(len(products), random.randint(1, 3)))

    @task
    def place_order(self):
        payload = order_payload(self.state.products)
        with self.client.post("/api/orders", json=payload, catch_response=True, name="POST /api/orders") as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["order_id"]
                self.state.order_number = payload["orderNumber"]
            else:
                resp.failure(f"Place order failed: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def advance_status(self):
        for status in ORDER_STATUSES[: random.randint(1, len(ORDER_STATUSES))]:
            with self.client.put(
                f"/api/orders/{self.state.order_id}/status",
                json={"status": status},
                catch_response=True,
                name="PUT /api/orders/{id}/status",
            ) as resp:
                if resp.status_code == 200:
                    self.state.current_status = status
                else:
                    resp.failure(f"Status change failed: {resp.status_code}")
                    return

    @task
    def read_back(self):
        with self.client.get(
            f"/api/orders/{self.state.order_id}",
            catch_response=True,
            name="GET /api/orders/{id}",
        ) as resp:
            if resp.status_code == 200 and resp.json()["status"] != self.state.current_status:
                resp.failure("Order status did not stick")
        self.interrupt()


class OrderingUser(HttpUser):
    """Shoppers placing and following orders."""

    wait_time = between(1.0, 3.0)
    tasks = [OrderLifecycleJourney]


class StockContentionUser(HttpUser):
    """Many buyers ordering the same product until it is sold out.

    The shared product is created once per user with a small stock. Stock
    must reach zero and never go negative however many orders land.
    """

    wait_time = between(0.1, 0.5)

    def on_start(self):
        resp = self.client.post("/api/products", data=product_form(stock=10), name="POST /api/products")
        self.product = resp.json()

    @task(5)
    def order_the_hot_product(self):
        payload = order_payload([self.product], max_quantity=4)
        self.client.post("/api/orders", json=payload, name="POST /api/orders (contended)")

    @task(1)
    def check_stock(self):
        with self.client.get(
            f"/api/products/{self.product['id']}",
            catch_response=True,
            name="GET /api/products/{id}",
        ) as resp:
            if resp.status_code == 200 and resp.json()["stock"] < 0:
                resp.failure(f"Negative stock: {resp.json()['stock']}")
