"""
Infrastructure layer for the timeclock attendance service.

This layer contains the implementation details for external systems integration:
- Database (SQLAlchemy asyncio with PostgreSQL or SQLite)
- Authentication (JWT bearer tokens)
- HTTP delivery (FastAPI routers and error handling)

The infrastructure layer implements interfaces defined in the domain layer.
"""
