"""
Storefront Email Package.

Modules:
- core: Base send_email function (SMTP)
- store: Order notification emails built on top of core
"""
