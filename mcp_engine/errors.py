"""Error types raised by the capability registry."""


class RegistryError(Exception):
    """Base error for all registry failures."""


class InvalidRegistrationError(RegistryError):
    """A registration is missing a required field or has a malformed one."""


class RegistrationConflictError(RegistryError):
    """A capability with the same name is already registered."""

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{kind.capitalize()} already registered: {name}")


class CapabilityNotFoundError(RegistryError):
    """No capability with the given name is registered."""

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{kind.capitalize()} not found: {name}")
