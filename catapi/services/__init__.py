"""
Cat Registry API — Services Layer (Resource Handlers)
======================================================

What:  One handler per API operation, between the routes (HTTP) and the
       stores (persistence).

Service Inventory:
    - CatService:  list / list in box / list own / get / create / update / delete
    - UserService: list / get / register / update self / delete self / token / login
    - FileService: image upload validation, storage, cleanup, path resolution

Every handler receives the session and the caller explicitly, asks the
authorization gate first, validates before touching a store, and raises
instead of formatting errors.
"""
