"""Booking core - store access and validation for organizations, staff and offerings.

Modules:
- config: environment settings
- database: engine and session factory construction
- models: SQLAlchemy table models
- schemas: pydantic validators and response records
- errors: error taxonomy shared by the gateway and the tool handlers
- crud: session-level store operations
- gateway: StoreGateway, the async facade used by the tool handlers
"""

__version__ = "1.0.0"
