"""Configurações Pydantic Settings para o serviço de cardápio."""
from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator

DEFAULT_PORT = 8080

class Settings(BaseSettings):
    """Configurações da aplicação. Carrega de env e .env.

    A porta vem de PORT (sem prefixo); o restante usa o prefixo MENU_.
    """
    model_config = SettingsConfigDict(env_file=".env", env_prefix="MENU_", case_sensitive=False,
                                      populate_by_name=True, extra="ignore")

    # HTTP
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=DEFAULT_PORT, validation_alias="PORT")

    # Shutdown: <= 0 espera indefinidamente pelas requisições em voo
    drain_timeout_s: float = Field(default=30.0)

    # Cardápio: JSON no mesmo formato de /api/menu; None usa o cardápio embutido
    catalog_path: str | None = Field(default=None)

    log_level: str = Field(default="INFO")

    @field_validator("port", mode="before")
    @classmethod
    def _port_or_default(cls, v):
        """Porta inválida ou fora de 1..65535 cai no padrão 8080."""
        try:
            port = int(str(v).strip())
        except (TypeError, ValueError):
            return DEFAULT_PORT
        return port if 0 < port < 65536 else DEFAULT_PORT

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper(cls, v):
        return str(v or "INFO").strip().upper()
