"""Session Issuer: validates credentials, mints and resolves bearer tokens."""
