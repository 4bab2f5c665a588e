# Routes package init
"""
Employees API — API Routes Package
=====================================

Route Inventory:
    - employees.py: GET/POST /employees, GET/PUT/DELETE /employees/{id}
    - health.py:    GET /health

Routes are thin: extract path/body, call the service, wrap the result in
the success envelope. Business logic lives in app/services.
"""
