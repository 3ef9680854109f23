"""
httpcallback service package.

Users register webhooks ("callbacks") over a small FastAPI app. Storage is
pluggable: a MongoDB-backed factory for deployments and an in-memory one
for tests and local runs.
"""
