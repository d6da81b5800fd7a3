# Routes package init
"""
Bookshelf Backend: API Routes Package
======================================

Route Inventory:
    - books.py:   GET    /books             (list all books)
                  GET    /books/{id}        (one book, or null)
                  POST   /books             (create)
                  PUT    /books/{id}        (update)
                  PATCH  /books/{id}        (update)
                  DELETE /books/{id}        (delete)
    - health.py:  GET    /health            (service health check)

Routes stay thin: read the request, call the service, choose the status
code. Rules live in services/book_service.py.
"""
