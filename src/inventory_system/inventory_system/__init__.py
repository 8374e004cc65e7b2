"""Inventory System package.

Feature modules (rbac, employees, equipment, audit, ...) each carry a domain
model, a repository interface with MySQL and in-memory implementations, a
service layer and a thin Flask controller.
"""
