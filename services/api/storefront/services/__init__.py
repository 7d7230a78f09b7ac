"""Business logic services.

Services contain all business logic and are called by routes and scripts.
DB-backed services take the AsyncSession explicitly; CMS-backed services
accept an optional client and fall back to the shared one.
"""
