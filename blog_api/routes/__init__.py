# Routes package init
"""
Blog API — API Routes Package
=============================

Route Inventory:
    - posts.py:   GET    /posts            (list every post)
                  GET    /posts/{id}       (one post)
                  POST   /posts            (create)
                  PUT    /posts/{id}       (partial update)
                  DELETE /posts/{id}       (delete)

Anything else is answered by the catch-all 404 registered in main.py.
Routes stay thin: check the request, call the service, pick the status.
"""
