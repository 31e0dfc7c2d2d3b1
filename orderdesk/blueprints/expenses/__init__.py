from .routes import expenses_bp  # noqa: F401
