"""Catalogue load test scenarios.

A stateful SequentialTaskSet journey through the product and image
lifecycle, plus a read-heavy browsing task. Steps execute in order and
each depends on the previous step succeeding.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import product_form, product_image
from loadtests.helpers.state import ProductState


class ProductImageLifecycle(SequentialTaskSet):
    """Create with upload -> Replace upload -> Update stock -> Delete.

    Exercises asset storage, replacement and cleanup on every step.
    """

    def on_start(self):
        self.state = ProductState()

    @task
    def create_product(self):
        form = product_form()
        with self.client.post(
            "/api/products",
            data=form,
            files=product_image(),
            catch_response=True,
            name="POST /api/products",
        ) as resp:
            if resp.status_code == 201:
                self.state.product_id = resp.json()["id"]
                self.state.name = form["name"]
            else:
                resp.failure(f"Create product failed: {resp.status_code}")
                self.interrupt()

    @task
    def replace_image(self):
        with self.client.put(
            f"/api/products/{self.state.product_id}",
            files=product_image(),
            catch_response=True,
            name="PUT /api/products/{id} (image)",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Replace image failed: {resp.status_code}")

    @task
    def update_stock(self):
        with self.client.put(
            f"/api/products/{self.state.product_id}",
            data={"stock": "42"},
            catch_response=True,
            name="PUT /api/products/{id}",
        ) as resp:
            if resp.status_code == 200:
                self.state.stock = resp.json()["stock"]
            else:
                resp.failure(f"Update stock failed: {resp.status_code}")

    @task
    def delete_product(self):
        with self.client.delete(
            f"/api/products/{self.state.product_id}",
            catch_response=True,
            name="DELETE /api/products/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Delete product failed: {resp.status_code}")
        self.interrupt()


class CatalogueBrowsing(SequentialTaskSet):
    """List products -> open one."""

    def on_start(self):
        self.products = []

    @task
    def list_products(self):
        with self.client.get("/api/products", catch_response=True, name="GET /api/products") as resp:
            if resp.status_code == 200:
                self.products = resp.json()
            else:
                resp.failure(f"List products failed: {resp.status_code}")
                self.interrupt()

    @task
    def view_product(self):
        if not self.products:
            self.interrupt()
            return
        product_id = self.products[0]["id"]
        self.client.get(f"/api/products/{product_id}", name="GET /api/products/{id}")
        self.interrupt()


class CatalogueUser(HttpUser):
    """Seller and shopper activity against the catalogue only."""

    wait_time = between(0.5, 2.0)
    tasks = {
        CatalogueBrowsing: 5,
        ProductImageLifecycle: 2,
    }
