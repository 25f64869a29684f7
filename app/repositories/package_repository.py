from typing import Iterable, List

from app.models.package import SubscriptionPackage
from app.repositories.base import BaseRepository


class PackageRepository(BaseRepository[SubscriptionPackage]):
    model = SubscriptionPackage
    entity_name = "Package"

    def _order_by(self):
        return [SubscriptionPackage.price.asc(), SubscriptionPackage.name.asc()]

    def list_active(self) -> List[SubscriptionPackage]:
        return self.list(is_active=True)

    def get_many(self, package_ids: Iterable[str]) -> dict:
        ids = list(set(package_ids))
        if not ids:
            return {}
        rows = self.db.query(SubscriptionPackage).filter(SubscriptionPackage.id.in_(ids)).all()
        return {row.id: row for row in rows}
