# Services package init
"""
Customer API — Services Layer
==============================

Service Inventory:
    - ResourceRepository: create/get/list/update/delete for one resource type,
      with store failures translated to StoreUnavailableError
"""
