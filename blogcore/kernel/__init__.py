"""
Blog kernel: models, identity primitives, result values and stores.
"""
