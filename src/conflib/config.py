from __future__ import annotations

import configparser
import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Type, TypeVar, Union

from .defaults import default_content
from .records import (
    RECORD_TYPES,
    CaptchaConfig,
    CoercionError,
    CORSConfig,
    DatabaseConfig,
    RCloneConfig,
    RedisConfig,
    SlaveConfig,
    SSLConfig,
    SystemConfig,
    ThumbConfig,
    UnixConfig,
    ValidationIssue,
    map_record,
    validate_record,
)

log = logging.getLogger(__name__)

ENV_VAR = "CONFCTL_CONFIG"
DEFAULT_CONFIG_NAME = "conf.ini"

R = TypeVar("R")

ConfigDocument = Mapping[str, Mapping[str, str]]


class ConfigError(RuntimeError):
    pass


class MaterializeError(ConfigError):
    pass


class ParseError(ConfigError):
    pass


class MappingError(ConfigError):
    def __init__(self, section: str, cause: CoercionError):
        super().__init__(f"section [{section}] could not be mapped: {cause}")
        self.section = section
        self.key = cause.key
        self.value = cause.value


class ValidationError(ConfigError):
    def __init__(self, issue: ValidationIssue):
        super().__init__(f"section [{issue.section}] is invalid: {issue}")
        self.issue = issue


@dataclass(frozen=True)
class AppConfig:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    system: SystemConfig = field(default_factory=SystemConfig)
    ssl: SSLConfig = field(default_factory=SSLConfig)
    unix: UnixConfig = field(default_factory=UnixConfig)
    captcha: CaptchaConfig = field(default_factory=CaptchaConfig)
    redis: RedisConfig = field(default_factory=RedisConfig)
    thumb: ThumbConfig = field(default_factory=ThumbConfig)
    cors: CORSConfig = field(default_factory=CORSConfig)
    rclone: RCloneConfig = field(default_factory=RCloneConfig)
    slave: SlaveConfig = field(default_factory=SlaveConfig)
    source_path: Optional[Path] = None

    def sections(self) -> Mapping[str, Any]:
        """Records keyed by the INI section they were read from."""
        records = (
            self.database,
            self.system,
            self.ssl,
            self.unix,
            self.captcha,
            self.redis,
            self.thumb,
            self.cors,
            self.rclone,
            self.slave,
        )
        return {r.SECTION: r for r in records}

    def to_json(self) -> str:
        out: dict = {name: asdict(record) for name, record in self.sections().items()}
        out["source_path"] = self.source_path
        # Path and anything else non-JSON renders as its string form
        return json.dumps(out, default=str, indent=2, sort_keys=True)


# Attribute on AppConfig for each record type
_ATTRS = {
    DatabaseConfig: "database",
    SystemConfig: "system",
    SSLConfig: "ssl",
    UnixConfig: "unix",
    CaptchaConfig: "captcha",
    RedisConfig: "redis",
    ThumbConfig: "thumb",
    CORSConfig: "cors",
    RCloneConfig: "rclone",
    SlaveConfig: "slave",
}


def resolve_config_path(explicit: Optional[Union[str, os.PathLike]] = None) -> Path:
    """Pick the config file location.

    An explicit path wins, then ``$CONFCTL_CONFIG``, then ``./conf.ini``. The
    file does not have to exist; :func:`ensure_config_file` creates it.
    """
    if explicit is not None:
        if not str(explicit):
            raise MaterializeError("config file path is empty")
        return Path(explicit).expanduser()
    override = os.environ.get(ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.cwd() / DEFAULT_CONFIG_NAME


def ensure_config_file(path: Union[str, os.PathLike]) -> Path:
    """Make sure ``path`` points at a config file, writing defaults if it is absent."""
    cfg_path = Path(path)
    if not str(path) or cfg_path == Path(""):
        raise MaterializeError("config file path is empty")
    if cfg_path.exists():
        return cfg_path

    log.info("No config file at %s, writing a default one", cfg_path)
    try:
        cfg_path.parent.mkdir(parents=True, exist_ok=True)
        with cfg_path.open("w", encoding="utf-8") as fh:
            fh.write(default_content())
    except OSError as e:
        raise MaterializeError(f"cannot create config file {cfg_path}: {e}") from e
    return cfg_path


def _unquote(value: str) -> str:
    for quote in ('"""', '"', "'", "`"):
        if len(value) >= 2 * len(quote) and value.startswith(quote) and value.endswith(quote):
            return value[len(quote):-len(quote)]
    return value


def parse_document(path: Union[str, os.PathLike]) -> ConfigDocument:
    """Parse the INI file at ``path`` into a read-only section -> key -> value mapping.

    A leading UTF-8 BOM is ignored, ``#``/``;`` start an inline comment when
    preceded by whitespace, and one pair of matching surrounding quotes is
    removed from each value.
    """
    parser = configparser.ConfigParser(
        interpolation=None,
        strict=False,
        inline_comment_prefixes=("#", ";"),
    )
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    try:
        with Path(path).open("r", encoding="utf-8-sig") as fh:
            parser.read_file(fh)
    except (configparser.Error, OSError, UnicodeDecodeError) as e:
        raise ParseError(f"cannot parse config file '{path}': {e}") from e

    return MappingProxyType(
        {
            name: MappingProxyType({k: _unquote(v) for k, v in parser.items(name)})
            for name in parser.sections()
        }
    )


def map_section(document: ConfigDocument, name: str, record_cls: Type[R]) -> R:
    """Map and validate one section; a missing section yields the record defaults."""
    section = document.get(name, {})
    try:
        record = map_record(record_cls, section)
    except CoercionError as e:
        raise MappingError(name, e) from e

    issue = validate_record(record)
    if issue is not None:
        raise ValidationError(issue)
    return record


def load_config(path: Union[str, os.PathLike]) -> AppConfig:
    """Materialize, parse, map and validate the config at ``path``.

    Any failure raises a :class:`ConfigError` subclass and nothing is returned;
    there is no partially loaded configuration.
    """
    cfg_path = ensure_config_file(path)
    document = parse_document(cfg_path)
    log.debug("Parsed sections from %s: %s", cfg_path, ", ".join(document) or "<none>")

    records = {}
    for record_cls in RECORD_TYPES:
        records[_ATTRS[record_cls]] = map_section(document, record_cls.SECTION, record_cls)

    return AppConfig(source_path=cfg_path, **records)
