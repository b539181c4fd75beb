# services/catalog.py
"""
Item catalog adapter.

Prices exclusive blog posts for purchase. Blog prices are stored in whole
rupees; everything the payment services see is in paise.
"""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from models import Blog

MINOR_UNITS_PER_MAJOR = 100


@dataclass(frozen=True)
class PurchasableItem:
     id: str
     seller_id: str
     price: int  # smallest currency unit
     is_purchasable: bool
     title: str = ""
     slug: str = ""


class BlogCatalog:

     def __init__(self, db: Session):
          self.db = db

     def get_purchasable_item(self, item_id: str) -> Optional[PurchasableItem]:
          """Return the item with its current seller and price, or None if it doesn't exist."""
          blog = self.db.get(Blog, item_id)
          if blog is None:
               return None
          price = (blog.price or 0) * MINOR_UNITS_PER_MAJOR
          return PurchasableItem(
               id=blog.id,
               seller_id=blog.author_id,
               price=price,
               is_purchasable=bool(blog.is_exclusive) and price > 0,
               title=blog.title,
               slug=blog.slug,
          )
