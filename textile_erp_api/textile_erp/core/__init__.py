"""
Cross-cutting pieces of the API: settings, logging context, domain errors,
password/JWT helpers and the FastAPI dependencies that resolve the caller's
company and membership role.
"""
