"""Configuration errors raised when a record does not match the pricing config."""


class ConfigurationError(ValueError):
    """Base error for config/data mismatches. Never retryable."""


class UnknownProductLineError(ConfigurationError):
    def __init__(self, line: str, normalized: str | None = None):
        self.line = line
        self.normalized = normalized
        detail = f" (normalized: {normalized})" if normalized and normalized != line else ""
        super().__init__(f"Unknown product line: {line}{detail}")


class UnknownRoleError(ConfigurationError):
    def __init__(self, role: str):
        self.role = role
        super().__init__(f"Unknown partner role: {role}")


class UnknownChannelError(ConfigurationError):
    def __init__(self, channel: str):
        self.channel = channel
        super().__init__(f"Unknown channel: {channel}")
