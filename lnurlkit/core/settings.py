import os
from pathlib import Path
from typing import Optional

from environs import Env  # type: ignore
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

env = Env()

VERSION = "0.1.0"


def find_env_file() -> Optional[str]:
    # env file: default to current dir, else home dir
    env_file = os.path.join(os.getcwd(), ".env")
    if not os.path.isfile(env_file):
        env_file = os.path.join(str(Path.home()), ".lnurlkit", ".env")
    if os.path.isfile(env_file):
        env.read_env(env_file, recurse=False, override=True)
        return env_file
    return None


class LnurlkitSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=find_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    env_file: Optional[str] = Field(default=None)


class EnvSettings(LnurlkitSettings):
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")


class HttpSettings(LnurlkitSettings):
    lnurl_timeout: float = Field(default=60.0)
    lnurl_verify_tls: bool = Field(default=True)
    lnurl_user_agent: Optional[str] = Field(default=None)
    socks_proxy: Optional[str] = Field(default=None)
    http_proxy: Optional[str] = Field(default=None)


class PaySettings(LnurlkitSettings):
    lnurl_check_invoice_amount: bool = Field(
        default=False,
        title="Check invoice amount",
        description="Reject invoices whose amount differs from the requested one.",
    )


class Settings(
    EnvSettings,
    HttpSettings,
    PaySettings,
    LnurlkitSettings,
):
    version: str = Field(default=VERSION)


settings = Settings()
