from __future__ import annotations

import os
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional, Tuple, Type

import yaml
from pydantic import BaseModel, Field, computed_field
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

__all__ = [
    "Config",
    "LogConfig",
    "DBConfig",
    "LedgerConfig",
    "SignerConfig",
    "WatcherConfig",
    "MultisigConfig",
    "FeeConfig",
    "get_config",
    "set_config",
    "set_data_dir",
]


_data_dir: str = ""
_config_dir: str = "config"


def config_file_path():
    return os.path.join(_data_dir, _config_dir, "config.yml")


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """
    A simple settings source class that loads variables from a YAML file

    Note: slightly adapted version of JsonConfigSettingsSource from docs.
    """

    _yaml_data: Dict[str, Any] | None = None

    @property
    def yaml_data(self) -> Dict[str, Any]:
        if self._yaml_data is None:
            yaml_file = config_file_path()
            if yaml_file is not None and os.path.exists(yaml_file):
                with open(yaml_file, mode="r", encoding="utf-8") as f:
                    self._yaml_data = yaml.safe_load(f)
            else:
                self._yaml_data = {}
        return self._yaml_data  # type: ignore

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> Tuple[Any, str, bool]:
        field_value = self.yaml_data.get(field_name)
        return field_value, field_name, False

    def prepare_field_value(
        self, field_name: str, field: FieldInfo, value: Any, value_is_complex: bool
    ) -> Any:
        return value

    def __call__(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {}

        for field_name, field in self.settings_cls.model_fields.items():
            field_value, field_key, value_is_complex = self.get_field_value(
                field, field_name
            )
            field_value = self.prepare_field_value(
                field_name, field, field_value, value_is_complex
            )
            if field_value is not None:
                d[field_key] = field_value

        return d


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "FATAL", "CRITICAL"]
DBDriver = Literal["sqlite"]
Commitment = Literal["processed", "confirmed", "finalized"]


def set_data_dir(dirname: str):
    global _data_dir

    _data_dir = dirname


class LogConfig(BaseModel):
    m_dir: str = Field(alias="dir")
    level: LogLevel
    filename: str = "txflow.log"

    @computed_field
    @property
    def dir(self) -> str:
        return os.path.abspath(os.path.join(_data_dir, self.m_dir))


class DBConfig(BaseModel):
    driver: DBDriver
    m_filename: str = Field(alias="filename")

    @computed_field
    @property
    def filename(self) -> str:
        return os.path.abspath(os.path.join(_data_dir, self.m_filename))

    @computed_field
    @property
    def connection(self) -> str:
        if self.driver == "sqlite":
            return f"sqlite+aiosqlite:///{self.filename}"
        else:
            raise ValueError(f"unsupported db driver {self.driver}")


class LedgerConfig(BaseModel):
    provider: str
    timeout: float = 30
    commitment: Commitment = "confirmed"


class SignerConfig(BaseModel):
    _privkey_file: str = "private_key.txt"
    _privkey: str = ""

    @property
    def privkey(self) -> str:
        if len(self._privkey) == 0:
            privkey_file = os.path.join(_data_dir, _config_dir, self._privkey_file)
            if os.path.exists(privkey_file):
                with open(privkey_file, mode="r", encoding="utf-8") as f:
                    self._privkey = f.read().strip()
        return self._privkey

    @privkey.setter
    def privkey(self, privkey: str):
        self._privkey = privkey


class WatcherConfig(BaseModel):
    poll_interval: float = 1
    timeout: float = 30
    history_size: int = 100


class MultisigConfig(BaseModel):
    # one week, the default of the multisig program
    proposal_expiry_seconds: int = 604800


class FeeConfig(BaseModel):
    network_fee: int = 5000
    protocol_flat_fee: int = 0
    # percent values, e.g. 0.25 means 0.25 %
    protocol_percent_fee: Decimal = Decimal(0)
    percent_fee_overrides: Dict[str, Decimal] = {}
    flat_fee_overrides: Dict[str, int] = {}


class Config(BaseSettings):
    log: LogConfig

    db: DBConfig

    ledger: LedgerConfig

    signer: SignerConfig = SignerConfig()
    watcher: WatcherConfig = WatcherConfig()
    multisig: MultisigConfig = MultisigConfig()
    fees: FeeConfig = FeeConfig()

    disabled_operations: List[str] = []

    server_host: str = "0.0.0.0"
    server_port: int = 7412
    headless: bool = False
    web_dist: str = ""

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            YamlConfigSettingsSource(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )


_config: Optional[Config] = None


def get_config():
    global _config

    if _config is None:
        _config = Config()  # type: ignore

    return _config


def set_config(config: Config):
    global _config
    _config = config
