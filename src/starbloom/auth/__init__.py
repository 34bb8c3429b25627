"""Authentication and authorization.

Opaque bearer tokens for users:
1. Signup → bcrypt-hashed password
2. Login → random 26-char token, only its SHA-256 stored
3. Every request → Authorization header resolved to an Identity
   (Anonymous or Authenticated) by the authenticate middleware

Handlers depend on require_authenticated for the login gate and call
ensure_owner for per-resource ownership.
"""
