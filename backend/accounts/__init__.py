# accounts/__init__.py
"""
Accounts app - authentication, users, roles and permissions.

This app provides:
- User: email-login user bound to a Role and, for customers, a Company
- Role / ApiPermission / RolePermission: permission keys per role
- RegistrationAttempt: recorded outcome of each self-service signup
- ActorContext: per-request role and permission lookup (accounts.authz)
"""
