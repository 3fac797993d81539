"""Leave Management package.

Feature modules (users, leaves) follow the same split: a thin Flask
controller, a service holding the business rules and a repository protocol
with its MySQL implementation.
"""
