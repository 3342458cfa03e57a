"""
Repository layer for data access.

Repositories encapsulate SQLAlchemy queries for each domain area. Company-owned
data goes through TenantRepository subclasses, which filter every statement by
the request's company; the session itself is expected to be bound with
textile_erp.db.session.tenant_context (see textile_erp.core.deps.get_tenant_session).
"""
