"""
auth — Account authentication module.

Provides:
  • Password hashing (bcrypt, auto-salted)
  • Signed, time-limited identity tokens
  • ``get_current_identity`` FastAPI dependency guarding task routes
"""
