# Services package init
"""
LibraryHub Backend — Services Layer
=====================================

What:  Business logic between routes (HTTP) and the database.

Service Inventory:
    - CategoryService:        category forest for the catalogue browser
    - SearchService:          free-text search with enriched hits
    - RecommendationService:  most-loaned, popular and recently added lists
    - LoanService:            active loans with progress and due dates
    - HomeService:            student home page assembled from the above

Shared helpers:
    - author_names:  join rows → "First Last, ..." per book
    - editions:      edition number → Spanish ordinal ("3ra")
    - best_effort:   result type for blocks that degrade to empty lists

Error policies:
    Category tree and search are fail-visible (ValidationError /
    DatabaseError propagate). Recommendations and loan history are
    best-effort (BestEffortResult, never raise).
"""
