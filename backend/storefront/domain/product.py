"""
Product Domain Model

Represents a product of the storefront catalog.
"""
import json
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List


def parse_image_list(value) -> List[str]:
    """Image paths are stored as a JSON array string"""
    if value is None or value == "":
        return []
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            return []
        return parsed if isinstance(parsed, list) else []
    return list(value)


class Product(BaseModel):
    """
    Product domain model - represents a product in our catalog

    Fields:
        id: Internal product ID (primary key)
        zh_title / en_title: Display names (Chinese required, English optional)
        zh_price / en_price: Prices as shown to each audience
        zh_desc / en_desc: Descriptions
        link: External product page
        image: Main image (first of `images`)
        images: Ordered list of /uploads/ paths
        category: Product category
    """

    id: int = Field(..., description="Internal product ID")

    zh_title: str = Field(..., description="Chinese display name")
    en_title: Optional[str] = Field(None, description="English display name")
    zh_price: str = Field(..., description="Chinese price label")
    en_price: Optional[str] = Field(None, description="English price label")
    zh_desc: str = Field(..., description="Chinese description")
    en_desc: Optional[str] = Field(None, description="English description")
    link: str = Field(..., description="Product link")

    image: Optional[str] = Field(None, description="Main image path")
    images: List[str] = Field(default_factory=list, description="Image paths")

    category: str = Field("wood", description="Product category")

    model_config = ConfigDict(from_attributes=True)

    @field_validator("images", mode="before")
    @classmethod
    def parse_images(cls, value):
        return parse_image_list(value)

    def to_dict(self) -> dict:
        return self.model_dump()


class ProductCreate(BaseModel):
    """Schema for creating a new product"""
    zh_title: Optional[str] = None
    en_title: Optional[str] = None
    zh_price: Optional[str] = None
    en_price: Optional[str] = None
    zh_desc: Optional[str] = None
    en_desc: Optional[str] = None
    link: Optional[str] = None
    category: Optional[str] = None


class ProductUpdate(BaseModel):
    """Schema for updating an existing product. Empty fields keep the stored value."""
    zh_title: Optional[str] = None
    en_title: Optional[str] = None
    zh_price: Optional[str] = None
    en_price: Optional[str] = None
    zh_desc: Optional[str] = None
    en_desc: Optional[str] = None
    link: Optional[str] = None
    category: Optional[str] = None
    existing_images: Optional[List[str]] = None
