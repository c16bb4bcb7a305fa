# Routes package init
"""
LibraryHub Backend — API Routes Package
=========================================

Route Inventory:
    - categories.py:       GET /api/categories/tree
    - search.py:           GET /api/search?query=
    - students.py:         GET /api/home, GET /api/loans                (session cookie)
                           GET /api/students/{account_number}/home
                           GET /api/students/{account_number}/loans
    - recommendations.py:  GET /api/recommendations/popular
                           GET /api/recommendations/recent
                           GET /api/recommendations/most-loaned
    - health.py:           GET /health

Routes stay thin: read the request, call one service, wrap the result in
the `{message, data}` envelope. Errors are raised as LibraryError
subclasses and turned into JSON by the handlers in main.py.
"""
