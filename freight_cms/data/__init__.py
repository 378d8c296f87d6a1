"""
Data layer: models and input validators.
"""
