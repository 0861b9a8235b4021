from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)

from storefront.db import Base

CUSTOMCAT_SOURCE = "customcat"


class CatalogProduct(Base):
    __tablename__ = "catalog_products"
    __table_args__ = (
        UniqueConstraint("external_source", "external_id", name="uq_catalog_external"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(128), nullable=False, default="Apparel", index=True)
    price = Column(String(32), nullable=False, default="0.00")  # decimal as string
    image_url = Column(String(1024), nullable=True)
    thumbnail_url = Column(String(1024), nullable=True)
    stock_quantity = Column(Integer, nullable=True)
    is_featured = Column(Boolean, default=False, nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)
    external_source = Column(String(32), nullable=True, index=True)
    external_id = Column(String(128), nullable=True, index=True)
    # "metadata" is reserved on declarative classes
    product_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self):
        return f"<CatalogProduct id={self.id} name={self.name} source={self.external_source}>"
