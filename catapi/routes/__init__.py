"""
Cat Registry API — API Routes Package
======================================

Route Inventory:
    - cats.py:     GET/POST /api/cats, GET /api/cats/user,
                   GET/PUT/DELETE /api/cats/{id}
    - users.py:    GET/POST/PUT/DELETE /api/users, GET /api/users/token,
                   GET /api/users/{id}
    - auth.py:     POST /api/auth/login (+ the get_caller dependency)
    - uploads.py:  GET /api/uploads/{path}
    - health.py:   GET /health

Routes are thin: extract request data and the caller, call a service,
return its result. Authorization and persistence live below them.
"""
