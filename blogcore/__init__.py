"""
Blog Core

Persistence and identity layer for a multi-user blogging platform.
"""

__version__ = "1.0.0"
