from arthub.client.api import ApiClient


class CartClient:
    """Cart endpoints. Every call returns the server's recomputed cart."""

    def __init__(self, api: ApiClient):
        self.api = api

    def get_cart(self) -> dict:
        return self.api.get("/cart/")

    def add_to_cart(self, artwork_id: int, quantity: int = 1) -> dict:
        return self.api.post("/cart/add", json={"artwork_id": artwork_id, "quantity": quantity})

    def update_item(self, artwork_id: int, quantity: int) -> dict:
        return self.api.put(f"/cart/item/{artwork_id}", json={"quantity": quantity})

    def remove_item(self, artwork_id: int) -> dict:
        return self.api.delete(f"/cart/item/{artwork_id}")

    def clear_cart(self) -> dict:
        return self.api.delete("/cart/")
