"""Process-wide test environment.

Settings are read lazily and cached, so the variables must be in place
before anything under ``apps`` is imported.
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-at-least-32-bytes")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:5173")
