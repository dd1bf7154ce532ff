"""
Utility modules: authentication helpers, exceptions, validators and dependencies.
"""
