from __future__ import annotations


class ConfigsError(Exception):
    """Base class for every error raised by configs_provider."""


class DuplicateTypeRegistration(ConfigsError, ValueError):
    def __init__(self, tag: str) -> None:
        super().__init__(f"A config table for {tag} is already registered")
        self.tag = tag


class DuplicateIdInBatch(ConfigsError, ValueError):
    def __init__(self, tag: str, config_id: int) -> None:
        super().__init__(f"Config id {config_id} appears more than once in the batch for {tag}")
        self.tag = tag
        self.config_id = config_id


class ConfigTypeNotRegistered(ConfigsError, LookupError):
    def __init__(self, tag: str) -> None:
        super().__init__(f"No config table registered for {tag}")
        self.tag = tag


class ConfigTypeMismatch(ConfigTypeNotRegistered, TypeError):
    """A stored config is not an instance of the type it is registered under."""

    def __init__(self, tag: str, value: object) -> None:
        super().__init__(tag)
        self.value_type = type(value).__qualname__

    def __str__(self) -> str:
        return f"Config of type {self.value_type} cannot be stored or read as {self.tag}"


class UnknownConfigType(ConfigTypeNotRegistered):
    """A type tag found on the wire does not resolve to a class."""

    def __str__(self) -> str:
        return f"Type tag {self.tag!r} does not resolve to a known config type"


class ConfigIdNotFound(ConfigsError, KeyError):
    def __init__(self, tag: str, config_id: int) -> None:
        super().__init__(tag, config_id)
        self.tag = tag
        self.config_id = config_id

    def __str__(self) -> str:
        return f"Config id {self.config_id} not found in the table for {self.tag}"


class NotSingletonConfig(ConfigsError, LookupError):
    def __init__(self, tag: str) -> None:
        super().__init__(
            f"The config table for {tag} is not a single config table. "
            "Use either 'get(cls, config_id)' or 'get_all(cls)' to get your needed config"
        )
        self.tag = tag


class UnserializableType(ConfigsError, TypeError):
    def __init__(self, tag: str, reason: str = "") -> None:
        msg = f"Config {tag} could not be serialized."
        if reason:
            msg += f" {reason}."
        msg += " If this is not used in game logic, add it to the exclusion set"
        super().__init__(msg)
        self.tag = tag


class MalformedEnvelope(ConfigsError, ValueError):
    pass


class BackendError(ConfigsError, RuntimeError):
    pass
