"""
Cat Registry API — Entity Stores
=================================

What:  Persistence interface for each resource type.
Why:   Services build filters that embed authorization constraints and hand
       them to a store; the store owns every SQL detail.

Store Inventory:
    - EntityStore: generic find / find_one / find_by_id / create / update / delete
    - CatStore:    + bounding-box filter, owner summary eager-loading
    - UserStore:   + redaction projection, email lookup, cascade to owned cats
"""

from catapi.stores.base import EntityStore
from catapi.stores.cat_store import CatStore
from catapi.stores.user_store import REDACTED, UserStore

__all__ = ["EntityStore", "CatStore", "UserStore", "REDACTED"]
