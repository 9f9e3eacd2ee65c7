# Services package init
"""
Blog API — Services Layer
=========================

Service Inventory:
    - PostService: the storage calls behind the /posts endpoints

Services receive the request's AsyncSession as an argument and hold no
state of their own, so the module-level singletons are shared freely.
"""
