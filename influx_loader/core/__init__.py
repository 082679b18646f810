"""
Core domain logic: models, configuration, schema handling and record mapping.
"""
