"""
Service layer: authorization policy and domain services.

- permissions: role strategies, named policy predicates, PermissionContext
- domain: one service per aggregate (tables, menu, orders, payments, staff,
  auth, reports)
"""
