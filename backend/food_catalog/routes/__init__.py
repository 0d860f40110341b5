# Routes package init
"""
Food Catalog Backend: API Routes Package
=========================================

Route Inventory:
    - foods.py:    POST   /api/foods             (create, optional image)
                   GET    /api/foods             (list, filter by category/available)
                   GET    /api/foods/{id}        (single item)
                   PUT    /api/foods/{id}        (partial update, optional new image)
                   DELETE /api/foods/{id}        (delete item and its image)
    - uploads.py:  GET    /api/uploads/foods/{filename}
    - health.py:   GET    /health

Routes only translate HTTP into service calls; record and file handling
lives in food_catalog.services.
"""
