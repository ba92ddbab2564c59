from typing import Dict, Iterable, Optional

from sqlalchemy.orm import Session

from partsflow.models.part import Part
from partsflow.repositories.base import BaseRepository


class PartRepository(BaseRepository[Part]):
    def __init__(self, db: Session):
        super().__init__(Part, db)

    def get_active(self, part_code: str) -> Optional[Part]:
        return (
            self.db.query(Part)
            .filter(Part.part_code == part_code, Part.is_active.is_(True))
            .first()
        )

    def get_active_map(self, part_codes: Iterable[str]) -> Dict[str, Part]:
        codes = list(set(part_codes))
        if not codes:
            return {}
        parts = (
            self.db.query(Part)
            .filter(Part.part_code.in_(codes), Part.is_active.is_(True))
            .all()
        )
        return {p.part_code: p for p in parts}
