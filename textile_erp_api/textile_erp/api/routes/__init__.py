"""
Route modules mounted by textile_erp.api.main under /api/v1.

Every router except auth and companies works inside the company selected by
the X-Tenant-ID header and returns the ApiResponse envelope.
"""
