# Repositories package init
"""
Food Catalog Backend: Persistence Layer
========================================

    - FoodRepository (Protocol): the contract the services depend on
    - SQLAlchemyFoodRepository: AsyncSession-backed implementation
"""
