# Importing the package registers every table on Base.metadata
from storefront.models.category import Category
from storefront.models.product import Product, product_tags
from storefront.models.tag import Tag
from storefront.models.user import User

__all__ = ["Category", "Product", "Tag", "User", "product_tags"]
