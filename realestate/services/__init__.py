"""
Service layer: business logic between routers and repositories.
"""
