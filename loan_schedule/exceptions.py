"""Exceptions raised by the schedule engine."""


class ScheduleError(Exception):
    """Base exception for all schedule engine errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class InvalidPrincipal(ScheduleError):
    """Raised when the principal is zero or negative."""

    def __init__(self, principal):
        super().__init__("Principal must be positive", {"principal": str(principal)})


class InvalidTerm(ScheduleError):
    """Raised when the term, deferment or payment day cannot form a schedule."""
    pass


class NoApplicableRate(ScheduleError):
    """Raised when no rate point is effective on the requested date."""

    def __init__(self, on_date, first_effective_date=None):
        details = {"date": on_date.isoformat()}
        if first_effective_date is not None:
            details["first_effective_date"] = first_effective_date.isoformat()
        super().__init__(f"No interest rate defined for {on_date.isoformat()}", details)


class BalanceUnderflow(ScheduleError):
    """Raised when adjustments would drive the outstanding principal below zero."""

    def __init__(self, balance, amount, effective_date):
        details = {
            "balance": str(balance),
            "amount": str(amount),
            "effective_date": effective_date.isoformat(),
        }
        super().__init__(
            f"Adjustment of {amount} on {effective_date.isoformat()} exceeds outstanding principal {balance}",
            details,
        )


class RoundingToleranceExceeded(ScheduleError):
    """Raised when the final period cannot bring the balance to zero."""

    def __init__(self, residual, tolerance):
        super().__init__(
            f"Final balance {residual} exceeds rounding tolerance {tolerance}",
            {"residual": str(residual), "tolerance": str(tolerance)},
        )
