"""
Merchant dashboard backend.
"""
