# backend/agenttrain/apps/reports/__init__.py
"""
Reports app

Turns a free-text prompt into a role-scoped training compliance report:
classify the prompt, resolve who the caller may see, fetch their
assignments and approved completions, compute each assignment's status,
and package rows plus a short summary.

Everything here is read-only and request-scoped.
"""
