"""
DevCamper Backend — Middleware Package
========================================

Middleware Chain (request direction):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    1. Rate Limit first: abusive clients are turned away before any work
    2. Request ID: correlation id for every log line and error envelope
    3. Logging: one access line per request with status and duration
"""
