# Routes package init
"""
Customer API — API Routes Package
==================================

Route Inventory:
    - resources.py: build_resource_router(), five CRUD routes per resource type
                    (mounted for every entry in customer_api.resources.RESOURCES)
    - health.py:    GET /health (service health check)

Routes stay thin: decode the identifier, call the repository once, serialize.
Error responses come from the global exception handlers in main.py.
"""
