"""
FastAPI RESTful API for the Book record service.

This module provides a REST API for:
- Listing and fetching book records
- Creating books with title/author validation and unique titles
- Updating books, creating them when the ID is unknown
- Deleting books
"""
