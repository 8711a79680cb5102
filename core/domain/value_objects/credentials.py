"""Portal credentials value object."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PortalCredentials:
    """Login credentials for the remote portal. The password is kept out of repr."""

    email: str
    password: str = field(repr=False)

    @property
    def is_complete(self) -> bool:
        return bool(self.email and self.password)
