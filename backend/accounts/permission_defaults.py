# accounts/permission_defaults.py

PERMISSION_DESCRIPTIONS = {
    # Users
    "users.view": "List and read users",
    "users.manage": "Create, update, activate and delete users",

    # Roles & permissions
    "permissions.view": "List permissions and roles",
    "permissions.manage": "Create permissions and assign them to roles",

    # Companies & plans
    "companies.view": "List and read companies",
    "companies.manage": "Create, update, delete and restore companies",
    "plans.view": "List and read plans, plan types, plan rates and transfer markup rates",
    "plans.manage": "Manage plans, plan types, plan rates and transfer markup rates",

    # Currency
    "currency.view": "Read currencies, groups, rates and conversion rates",
    "currency.manage": "Manage currencies, groups and company/plan rates",

    # Logs
    "logs.view": "Read request audit logs",
    "logs.create": "Submit logs from other services",

    # Payments provider files
    "files.upload": "Upload documents to the payments provider",
    "files.download": "Request download links from the payments provider",

    # Webhooks
    "webhooks.view": "Read webhook configuration and received events",
    "webhooks.manage": "Manage webhook event types, templates and rules",
}


ROLE_DEFAULTS = {
    # admin is implicitly allowed everything; the explicit grants keep the
    # permission listing for the role meaningful.
    "admin": set(PERMISSION_DESCRIPTIONS),
    "customer": {
        "companies.view",
        "currency.view",
        "files.upload",
        "files.download",
        "webhooks.view",
    },
}


def all_permission_codes() -> set:
    return set(PERMISSION_DESCRIPTIONS)
