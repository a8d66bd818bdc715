"""Domain errors raised by the estimate engine and the services around it."""


class EstimatorError(Exception):
    """Base class for every error the estimator raises on purpose."""


class NotFoundError(EstimatorError):
    """
    A referenced project, calculator, section, line or product does not exist,
    or the calculator has already been deleted.
    """

    def __init__(self, kind: str, ident: str):
        self.kind = kind
        self.ident = ident
        super().__init__(f"{kind} not found: {ident}")


class InvalidFieldError(EstimatorError):
    """A line field that the calculator variant does not define or allow editing."""

    def __init__(self, variant: str, field: str):
        self.variant = variant
        self.field = field
        super().__init__(f"Field '{field}' is not editable on {variant} lines")


class ValidationError(EstimatorError):
    """Rejected input outside the engine (blank project or calculator names)."""
