"""HR Portal package.

This package is organized by feature modules (users, attendance, leaves, ...)
with a thin Flask controller layer over service/repository layers.
Authorization is evaluated centrally by ``core.policies.AccessPolicy``.
"""
