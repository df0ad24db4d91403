"""
Service layer: the token authority and the user store it depends on.
Import from the submodules (services.token_authority, services.user_store,
services.errors); this package stays import-light because models.user
depends on services.errors.
"""
