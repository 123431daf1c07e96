from typing import Optional, Sequence


class CommissionError(Exception):
    """
    Base class for failures of the commission engine.

    `kind` is the name written to the operator queue. `retryable` tells the
    operator whether re-running the same transaction can succeed without
    changing any data first.
    """
    kind = "CommissionError"
    retryable = False

    def __init__(self, message: str, *, transaction_id: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.transaction_id = transaction_id


class ConfigurationMissing(CommissionError):
    kind = "ConfigurationMissing"

    def __init__(self, service_type: str, provider: Optional[str] = None, *, transaction_id: Optional[int] = None):
        detail = f"No active commission config for service type '{service_type}'"
        if provider:
            detail += f" and provider '{provider}'"
        super().__init__(detail, transaction_id=transaction_id)
        self.service_type = service_type
        self.provider = provider


class ConfigurationAmbiguous(CommissionError):
    kind = "ConfigurationAmbiguous"

    def __init__(self, service_type: str, config_ids: Sequence[int], *, transaction_id: Optional[int] = None):
        super().__init__(
            f"Configs {list(config_ids)} are equally specific for service type '{service_type}'",
            transaction_id=transaction_id,
        )
        self.service_type = service_type
        self.config_ids = list(config_ids)


class HierarchyMalformed(CommissionError):
    kind = "HierarchyMalformed"

    def __init__(self, message: str, *, user_id: Optional[int] = None, transaction_id: Optional[int] = None):
        super().__init__(message, transaction_id=transaction_id)
        self.user_id = user_id


class InvalidAmount(CommissionError):
    kind = "InvalidAmount"

    def __init__(self, amount, *, transaction_id: Optional[int] = None):
        super().__init__(f"Transaction amount must be positive, got {amount}", transaction_id=transaction_id)
        self.amount = amount


class PartialFailure(CommissionError):
    kind = "PartialFailure"
    retryable = True


class InvalidCommissionConfig(ValueError):
    """Raised when a commission split fails the sanity bounds. Never clamped."""
    pass
