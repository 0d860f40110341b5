# Services package init
"""
Food Catalog Backend: Services Layer
=====================================

Service Inventory:
    - FileStore:   image files on disk (stage, delete, resolve public URLs)
    - FoodService: create/update/delete with image staging and cleanup
    - FoodQueries: read-only listing and lookup
    - parsing:     price/availability/text field parsing shared by the above

FoodService and FoodQueries receive a FoodRepository, so they are tested
against an in-memory repository without a database.
"""
