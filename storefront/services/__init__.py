"""
Storefront API — Services Layer
================================

What:  Business logic between the routes (HTTP) and the database.
How:   Each service is a stateless class with a module-level singleton; every
       method takes the request's AsyncSession as its first argument.

Service Inventory:
    - CategoryService: category tree CRUD, parent and cycle checks
    - ProductService:  product CRUD, listing, slug conflicts
    - TagService:      tag CRUD and tag-id resolution for products

Services raise StorefrontError subclasses; they never build HTTP responses.
"""
