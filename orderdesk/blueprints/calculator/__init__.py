from .routes import calculator_bp  # noqa: F401
