# Services package init
"""
Bookshelf Backend: Services Layer
==================================

What:  Business rules sitting between routes (HTTP) and repositories (store).

Service Inventory:
    - BookService: list / get / create / update / delete, ISBN uniqueness,
      not-found handling, database error wrapping
"""
