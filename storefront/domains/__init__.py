"""
Storefront Domains
"""
