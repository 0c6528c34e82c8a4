"""
DevCamper Backend — Authentication Package
============================================

Token verification (security.py) and the FastAPI dependencies that turn a
request into an authenticated, role-checked User (deps.py).
"""
