from dataclasses import dataclass
import os

from .exceptions import ConfigurationError


AUTH_VARIANTS = ("bearer", "raw")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ClientSettings:
    """
    Runtime configuration for the KonataBlog API client.

    Attributes
    ----------
    base_url : str
        Backend root; endpoint paths are appended verbatim.
    token_file : str
        JSON file holding the persisted bearer token.
    timeout_seconds : float
        Default per-request deadline handed to `requests`.
    auth_variant : str
        "bearer" sends `Bearer <token>`, "raw" sends the bare token.
    offline_fallback : bool
        Serve canned responses when the backend is unreachable.
    """

    base_url: str = "http://localhost:8080/api"
    token_file: str = ".konata_token.json"
    timeout_seconds: float = 30.0
    auth_variant: str = "bearer"
    offline_fallback: bool = True

    @staticmethod
    def from_env() -> "ClientSettings":
        """
        Build settings from `KONATA_*` environment variables.

        Raises
        ------
        ConfigurationError
            If a value cannot be parsed or fails validation.
        """
        raw_timeout = os.getenv("KONATA_TIMEOUT_SECONDS", "30").strip()
        try:
            timeout_seconds = float(raw_timeout)
        except ValueError:
            raise ConfigurationError(
                f"KONATA_TIMEOUT_SECONDS must be a number, got {raw_timeout!r}"
            )

        settings = ClientSettings(
            base_url=os.getenv(
                "KONATA_API_BASE_URL", "http://localhost:8080/api"
            ).strip().rstrip("/"),
            token_file=os.getenv(
                "KONATA_TOKEN_FILE", ".konata_token.json"
            ).strip(),
            timeout_seconds=timeout_seconds,
            auth_variant=os.getenv(
                "KONATA_AUTH_VARIANT", "bearer"
            ).strip().lower(),
            offline_fallback=_env_flag("KONATA_OFFLINE_FALLBACK", "true"),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if not self.base_url:
            raise ConfigurationError("KONATA_API_BASE_URL must not be empty")

        if self.timeout_seconds <= 0:
            raise ConfigurationError(
                "KONATA_TIMEOUT_SECONDS must be greater than 0"
            )

        if self.auth_variant not in AUTH_VARIANTS:
            raise ConfigurationError(
                "KONATA_AUTH_VARIANT must be one of: bearer, raw"
            )
