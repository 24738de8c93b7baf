"""
Tenants package - merchants operating the point-of-sale system.

Each tenant may carry its own iPOS Transact credentials; recurring billing
falls back to the globally configured ones otherwise.
"""
