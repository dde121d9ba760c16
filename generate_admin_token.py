import secrets

# Random shared secret for the ADMIN_TOKEN environment variable; clients send it as X-Admin-Token.
token = secrets.token_urlsafe(32)
print(token)
