from typing import List, Optional

from app.models.cart_item import CartItem
from app.repositories.base import BaseRepository


class CartRepository(BaseRepository[CartItem]):
    model = CartItem
    entity_name = "Cart item"

    def _order_by(self):
        # Cart order drives credit consumption at checkout
        return [CartItem.created_at.asc(), CartItem.id.asc()]

    def list_by_user(self, user_id: str) -> List[CartItem]:
        return self.list(user_id=user_id)

    def get_for_user(self, cart_item_id: str, user_id: str) -> Optional[CartItem]:
        return (
            self.db.query(CartItem)
            .filter(CartItem.user_id == user_id, CartItem.id == cart_item_id)
            .first()
        )

    def get_by_user_and_package(self, user_id: str, package_id: str) -> Optional[CartItem]:
        return (
            self.db.query(CartItem)
            .filter(CartItem.user_id == user_id, CartItem.package_id == package_id)
            .first()
        )
