"""
Presentation helpers: pt-BR formatting, pagination and table filters.
"""
