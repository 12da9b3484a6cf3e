"""Read-only access to category and tag reference data."""

from typing import List

from petstore.db.base import Category as DbCategory
from petstore.db.base import Tag as DbTag
from petstore.domain.entities import Category, Tag
from petstore.domain.interfaces import ICatalogReader

from .db_errors import translate_db_errors


class CatalogRepository(ICatalogReader):
    def __init__(self, db_session) -> None:
        self.db = db_session

    def list_categories(self) -> List[Category]:
        with translate_db_errors("list categories"):
            rows = self.db.query(DbCategory).order_by(DbCategory.name).all()
            return [Category(id=row.id, name=row.name) for row in rows]

    def list_tags(self) -> List[Tag]:
        with translate_db_errors("list tags"):
            rows = self.db.query(DbTag).order_by(DbTag.name).all()
            return [Tag(id=row.id, name=row.name) for row in rows]
