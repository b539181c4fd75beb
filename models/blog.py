# models/blog.py
"""
Blog model - the catalog side of a purchase.

Blogs are owned by the blogging service; this backend only reads the columns
it needs to price and attribute an exclusive post.
"""
from sqlalchemy import Column, String, Integer, Boolean, DateTime, func
from sqlalchemy.orm import relationship
from .base import Base, new_id


class Blog(Base):
     """
     Blog post. ``price`` is in whole currency units (rupees); exclusive posts
     with a positive price can be purchased.
     """
     __tablename__ = "blogs"

     id = Column(String(36), primary_key=True, default=new_id)
     author_id = Column(String(64), nullable=False, index=True)
     title = Column(String(255), nullable=False)
     slug = Column(String(255), nullable=False, unique=True, index=True)

     # Monetization
     is_exclusive = Column(Boolean, default=False, nullable=False)
     price = Column(Integer, nullable=True)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     purchases = relationship("Purchase", back_populates="item")

     def __repr__(self):
          return f"<Blog(id={self.id}, slug='{self.slug}', exclusive={self.is_exclusive}, price={self.price})>"
