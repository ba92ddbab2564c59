from typing import Optional

from sqlalchemy.orm import Session

from partsflow.models.product import Product
from partsflow.repositories.base import BaseRepository


class ProductRepository(BaseRepository[Product]):
    def __init__(self, db: Session):
        super().__init__(Product, db)

    def get_active(self, product_code: str) -> Optional[Product]:
        return (
            self.db.query(Product)
            .filter(Product.product_code == product_code, Product.is_active.is_(True))
            .first()
        )
