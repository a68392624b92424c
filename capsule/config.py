"""Capsule Server Configuration."""

import secrets
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    server_name: str = "Capsule"
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    log_level: str = "INFO"

    # Paths
    data_dir: Path = Path.home() / "capsule" / "data"

    # Database
    db_path: Path = Path.home() / "capsule" / "data" / "capsule.db"
    database_url: Optional[str] = None  # overrides db_path when set
    db_busy_timeout: float = 5.0  # seconds

    # JWT (issued by the identity provider)
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_audience: Optional[str] = None
    access_token_expire_minutes: int = 60

    # Invites
    invite_token_bytes: int = 24  # 192 bits
    web_app_url: str = "https://capsule.app"
    url_scheme: str = "capsule"

    model_config = {"env_prefix": "CAPSULE_"}

    @property
    def sqlalchemy_url(self) -> str:
        return self.database_url or f"sqlite:///{self.db_path}"

    def ensure_dirs(self) -> None:
        """Create all required directories."""
        for d in [self.data_dir, self.db_path.parent]:
            d.mkdir(parents=True, exist_ok=True)

    def ensure_secrets(self) -> None:
        """Fall back to a locally generated signing key kept in data_dir/.secrets.

        Only for development; deployments set CAPSULE_JWT_SECRET to the
        identity provider's key.
        """
        if self.jwt_secret:
            return
        secrets_file = self.data_dir / ".secrets"
        if secrets_file.exists():
            self.jwt_secret = secrets_file.read_text().strip().removeprefix("jwt_secret=")
        if not self.jwt_secret:
            self.jwt_secret = secrets.token_urlsafe(32)
            secrets_file.write_text(f"jwt_secret={self.jwt_secret}\n")


settings = Settings()
settings.ensure_dirs()
settings.ensure_secrets()
