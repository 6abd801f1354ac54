"""
Storefront API — Routes Package
================================

Route Inventory:
    - categories.py: /api/categories       (CRUD, admin-gated writes)
    - products.py:   /api/products         (CRUD, listing, lookup by slug)
    - tags.py:       /api/tags             (list, create, delete)
    - health.py:     /api/health           (database probe)

Routes stay thin: each one declares its chain as FastAPI dependencies
(validation, then the role gate) and hands the checked input to a service.
Business logic lives in storefront.services.
"""
