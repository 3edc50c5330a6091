"""
auth — User authentication module.

Provides:
  • Password hashing (bcrypt, SHA-256 pre-hash)
  • JWT access / refresh token issuance & verification
  • Signup / login / refresh orchestration and API routes
  • ``get_current_user_id`` FastAPI dependency (the request gate)
"""
