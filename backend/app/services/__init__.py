# Services package init
"""
Employees API — Services Layer
=================================

Service Inventory:
    - employee_rules:   declarative field rule table shared by create/update
    - employee_service: list/get/create/update/delete against the employees table
"""
