"""Typed records for each configuration section.

Every record is a frozen dataclass that carries an explicit ``FIELDS`` tuple
describing, per attribute, the INI key it reads, how the raw string is
coerced, and which rules the coerced value must satisfy. ``map_record`` and
``validate_record`` walk those descriptors; nothing here inspects type
annotations at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Dict, Mapping, Optional, Tuple, Type, TypeVar

R = TypeVar("R")

_TRUE = {"1", "t", "T", "true", "TRUE", "True", "yes", "YES", "Yes", "y", "Y", "on", "ON", "On"}
_FALSE = {"0", "f", "F", "false", "FALSE", "False", "no", "NO", "No", "n", "N", "off", "OFF", "Off"}

LIST_DELIMITER = ","


class CoercionError(ValueError):
    def __init__(self, key: str, value: str, reason: str):
        super().__init__(f"{key} = {value!r}: {reason}")
        self.key = key
        self.value = value
        self.reason = reason


# Coercions: raw INI string -> typed value. Raise ValueError on bad input.


def to_str(raw: str) -> str:
    return raw


def to_int(raw: str) -> int:
    text = raw.strip()
    if "_" in text or not text.isascii():
        raise ValueError(f"expected an integer, got {text!r}")
    try:
        return int(text, 10)
    except ValueError:
        raise ValueError(f"expected an integer, got {text!r}") from None


def to_uint(raw: str) -> int:
    value = to_int(raw)
    if value < 0:
        raise ValueError(f"expected a non-negative integer, got {value}")
    return value


def to_bool(raw: str) -> bool:
    text = raw.strip()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"expected a boolean, got {text!r}")


def to_list(raw: str) -> Tuple[str, ...]:
    if not raw.strip():
        return ()
    return tuple(item.strip() for item in raw.split(LIST_DELIMITER))


# Rules: predicates with a human readable description.


@dataclass(frozen=True)
class Rule:
    description: str
    check: Callable[[Any], bool]

    def __call__(self, value: Any) -> bool:
        return self.check(value)


def _is_empty(value: Any) -> bool:
    return value is None or value == 0 or value == "" or value == ()


def required() -> Rule:
    return Rule("required", lambda v: not _is_empty(v))


def one_of(*choices: str) -> Rule:
    return Rule("one of " + "|".join(choices), lambda v: v in choices)


def at_least(n: int) -> Rule:
    return Rule(f">= {n}", lambda v: v >= n)


def at_most(n: int) -> Rule:
    return Rule(f"<= {n}", lambda v: v <= n)


def greater_than(n: int) -> Rule:
    return Rule(f"> {n}", lambda v: v > n)


def min_length(n: int) -> Rule:
    return Rule(f"length >= {n}", lambda v: len(v) >= n)


def omit_empty(rule: Rule) -> Rule:
    """Apply ``rule`` only when the value is set."""
    return Rule(f"{rule.description} (when set)", lambda v: _is_empty(v) or rule(v))


@dataclass(frozen=True)
class FieldSpec:
    name: str
    key: str
    coerce: Callable[[str], Any]
    rules: Tuple[Rule, ...] = ()


@dataclass(frozen=True)
class ValidationIssue:
    section: str
    field: str
    key: str
    value: Any
    rule: str

    def __str__(self) -> str:
        return f"[{self.section}] {self.key} = {self.value!r} violates '{self.rule}'"


def _f(name: str, key: str, coerce: Callable[[str], Any], *rules: Rule) -> FieldSpec:
    return FieldSpec(name, key, coerce, tuple(rules))


@dataclass(frozen=True)
class DatabaseConfig:
    type: str = "UNSET"
    user: str = ""
    password: str = ""
    host: str = ""
    name: str = ""
    table_prefix: str = ""
    db_file: str = "cloudreve.db"
    port: int = 3306
    charset: str = "utf8"

    SECTION: ClassVar[str] = "Database"
    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        _f("type", "Type", to_str),
        _f("user", "User", to_str),
        _f("password", "Password", to_str),
        _f("host", "Host", to_str),
        _f("name", "Name", to_str),
        _f("table_prefix", "TablePrefix", to_str),
        _f("db_file", "DBFile", to_str),
        _f("port", "Port", to_int),
        _f("charset", "Charset", to_str),
    )


@dataclass(frozen=True)
class SystemConfig:
    mode: str = "master"
    listen: str = ":5000"
    debug: bool = False
    session_secret: str = ""
    hash_id_salt: str = ""

    SECTION: ClassVar[str] = "System"
    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        _f("mode", "Mode", to_str, one_of("master", "slave")),
        _f("listen", "Listen", to_str, required()),
        _f("debug", "Debug", to_bool),
        _f("session_secret", "SessionSecret", to_str),
        _f("hash_id_salt", "HashIDSalt", to_str),
    )


@dataclass(frozen=True)
class SSLConfig:
    cert_path: str = ""
    key_path: str = ""
    listen: str = ":443"

    SECTION: ClassVar[str] = "SSL"
    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        _f("cert_path", "CertPath", to_str, omit_empty(required())),
        _f("key_path", "KeyPath", to_str, omit_empty(required())),
        _f("listen", "Listen", to_str, required()),
    )


@dataclass(frozen=True)
class UnixConfig:
    listen: str = ""

    SECTION: ClassVar[str] = "UnixSocket"
    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (_f("listen", "Listen", to_str),)


@dataclass(frozen=True)
class SlaveConfig:
    secret: str = ""
    callback_timeout: int = 20
    signature_ttl: int = 60

    SECTION: ClassVar[str] = "Slave"
    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        _f("secret", "Secret", to_str, omit_empty(min_length(64))),
        _f("callback_timeout", "CallbackTimeout", to_int, omit_empty(at_least(1))),
        _f("signature_ttl", "SignatureTTL", to_int, omit_empty(at_least(1))),
    )


@dataclass(frozen=True)
class CaptchaConfig:
    height: int = 60
    width: int = 240
    mode: int = 3
    complex_of_noise_text: int = 0
    complex_of_noise_dot: int = 0
    is_show_hollow_line: bool = False
    is_show_noise_dot: bool = True
    is_show_noise_text: bool = False
    is_show_slime_line: bool = True
    is_show_sine_line: bool = False
    captcha_len: int = 6

    SECTION: ClassVar[str] = "Captcha"
    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        _f("height", "Height", to_int, at_least(0)),
        _f("width", "Width", to_int, at_least(0)),
        _f("mode", "Mode", to_int, at_least(0), at_most(3)),
        _f("complex_of_noise_text", "ComplexOfNoiseText", to_int, at_least(0), at_most(2)),
        _f("complex_of_noise_dot", "ComplexOfNoiseDot", to_int, at_least(0), at_most(2)),
        _f("is_show_hollow_line", "IsShowHollowLine", to_bool),
        _f("is_show_noise_dot", "IsShowNoiseDot", to_bool),
        _f("is_show_noise_text", "IsShowNoiseText", to_bool),
        _f("is_show_slime_line", "IsShowSlimeLine", to_bool),
        _f("is_show_sine_line", "IsShowSineLine", to_bool),
        _f("captcha_len", "CaptchaLen", to_int, greater_than(0)),
    )


@dataclass(frozen=True)
class RedisConfig:
    network: str = "tcp"
    server: str = ""
    password: str = ""
    db: str = "0"

    SECTION: ClassVar[str] = "Redis"
    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        _f("network", "Network", to_str),
        _f("server", "Server", to_str),
        _f("password", "Password", to_str),
        _f("db", "DB", to_str),
    )


@dataclass(frozen=True)
class ThumbConfig:
    max_width: int = 400
    max_height: int = 300
    file_suffix: str = "._thumb"

    SECTION: ClassVar[str] = "Thumbnail"
    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        _f("max_width", "MaxWidth", to_uint),
        _f("max_height", "MaxHeight", to_uint),
        _f("file_suffix", "FileSuffix", to_str, min_length(1)),
    )


@dataclass(frozen=True)
class CORSConfig:
    allow_origins: Tuple[str, ...] = ("UNSET",)
    allow_methods: Tuple[str, ...] = ("PUT", "POST", "GET", "OPTIONS")
    allow_headers: Tuple[str, ...] = (
        "Cookie",
        "X-Policy",
        "Authorization",
        "Content-Length",
        "Content-Type",
        "X-Path",
        "X-FileName",
    )
    allow_credentials: bool = False
    expose_headers: Tuple[str, ...] = ()

    SECTION: ClassVar[str] = "CORS"
    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        _f("allow_origins", "AllowOrigins", to_list),
        _f("allow_methods", "AllowMethods", to_list),
        _f("allow_headers", "AllowHeaders", to_list),
        _f("allow_credentials", "AllowCredentials", to_bool),
        _f("expose_headers", "ExposeHeaders", to_list),
    )


@dataclass(frozen=True)
class RCloneConfig:
    # Binds: "/mnt/ibm:ibm" style entries, or the single sentinel "UNSET"
    config: str = ""
    binds: Tuple[str, ...] = ("UNSET",)

    SECTION: ClassVar[str] = "RClone"
    FIELDS: ClassVar[Tuple[FieldSpec, ...]] = (
        _f("config", "Config", to_str),
        _f("binds", "Binds", to_list),
    )


RECORD_TYPES: Tuple[type, ...] = (
    DatabaseConfig,
    SystemConfig,
    SSLConfig,
    UnixConfig,
    CaptchaConfig,
    RedisConfig,
    ThumbConfig,
    CORSConfig,
    RCloneConfig,
    SlaveConfig,
)


def map_record(record_cls: Type[R], section: Mapping[str, str]) -> R:
    """Build ``record_cls`` from the raw key/value pairs of one section.

    Keys the record does not declare are ignored; declared keys that are
    missing, and list keys with an empty value, keep the record's default.
    Raises :class:`CoercionError` when a value cannot be converted to the
    field's type.
    """
    values: Dict[str, Any] = {}
    for spec in record_cls.FIELDS:  # type: ignore[attr-defined]
        if spec.key not in section:
            continue
        raw = section[spec.key]
        if spec.coerce is to_list and not raw.strip():
            continue
        try:
            values[spec.name] = spec.coerce(raw)
        except ValueError as e:
            raise CoercionError(spec.key, raw, str(e)) from e
    return record_cls(**values)


def validate_record(record: Any) -> Optional[ValidationIssue]:
    """Return the first rule violation in ``record``, or ``None`` if it is valid."""
    for spec in record.FIELDS:
        value = getattr(record, spec.name)
        for rule in spec.rules:
            if not rule(value):
                return ValidationIssue(
                    section=record.SECTION,
                    field=spec.name,
                    key=spec.key,
                    value=value,
                    rule=rule.description,
                )
    return None
