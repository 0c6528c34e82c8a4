"""
DevCamper Backend — API Routes Package
========================================

Route Inventory:
    - bootcamps.py: /api/v1/bootcamps...   (bootcamp resource)
    - uploads.py:   GET /uploads/{name}    (stored photos)
    - health.py:    GET /health            (service health check)

Routes are thin: they extract input, resolve the caller and call a service.
Business rules live in services/ and policies.py.
"""
