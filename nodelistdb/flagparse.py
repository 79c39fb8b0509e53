"""Parsing of the flags field of nodelist entries."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .flags import ParserFlagInfo, get_parser_flag_map
from .models import EmailProtocolDetail, InternetConfiguration, InternetProtocolDetail

DEFAULT_PORTS: dict[str, int] = {
    "IBN": 24554,  # BinkP
    "ITN": 23,  # Telnet
    "IFC": 60179,  # EMSI over TCP
    "IFT": 21,  # FTP
}

LEGACY_FLAG_MAP: dict[str, str] = {
    "XP:": "XA",
    "MO:": "MO",
    "LO:": "LO",
    "CM:": "CM",
}

_CONNECTION_PROTOCOLS = frozenset({"IBN", "IFC", "ITN", "IVM", "IFT"})
_EMAIL_WITH_VALUE = frozenset({"IMI", "ITX", "ISE"})
_BARE_PROTOCOLS = frozenset({"IBN", "IFC", "ITN", "IVM", "IFT", "INA", "IP"})
_BARE_EMAIL_PROTOCOLS = frozenset({"IMI", "ITX", "ISE", "IUC", "EMA", "EVY"})
_INFO_FLAGS = frozenset({"INO4", "INO6", "ICM"})
_ADVANCED_EMAIL_FLAGS = frozenset({"IEM", "IMI", "ITX"})

_INTEGER = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _to_int(text: str) -> Optional[int]:
    """Parse a strict decimal integer; None if it is not one."""
    if not _INTEGER.fullmatch(text):
        return None
    number = int(text)
    if not _INT64_MIN <= number <= _INT64_MAX:
        return None
    return number


@dataclass
class ParsedFlags:
    """Flags of one entry split by kind, with the internet configuration JSON."""

    flags: list[str] = field(default_factory=list)
    internet_protocols: list[str] = field(default_factory=list)
    internet_hostnames: list[str] = field(default_factory=list)
    internet_ports: list[int] = field(default_factory=list)
    internet_emails: list[str] = field(default_factory=list)
    internet_config: Optional[str] = None


@dataclass
class AdvancedFlags:
    """Flags of one entry categorised by the flag documentation map."""

    all_flags: list[str] = field(default_factory=list)
    internet_protocols: list[str] = field(default_factory=list)
    internet_hostnames: list[str] = field(default_factory=list)
    internet_ports: list[int] = field(default_factory=list)
    internet_emails: list[str] = field(default_factory=list)
    modem_flags: list[str] = field(default_factory=list)


def parse_protocol_value(value: str) -> tuple[str, int]:
    """Split a protocol flag value into (address, port); missing parts are "" and 0."""
    port_only = _to_int(value)
    if port_only is not None and 0 < port_only < 65536:
        return "", port_only

    if value.startswith("[") and "]" in value:
        bracket_end = value.index("]")
        address = value[: bracket_end + 1]
        port = 0
        if bracket_end + 1 < len(value) and value[bracket_end + 1] == ":":
            parsed = _to_int(value[bracket_end + 2 :])
            if parsed is not None:
                port = parsed
        return address, port

    last_colon = value.rfind(":")
    if last_colon > 0 and value[:last_colon].count(":") == 1:
        possible = _to_int(value[last_colon + 1 :])
        if possible is not None and 0 < possible < 65536:
            return value[:last_colon], possible

    return value, 0


def build_internet_config(
    protocols: Mapping[str, InternetProtocolDetail],
    defaults: Mapping[str, str],
    email_protocols: Mapping[str, EmailProtocolDetail],
    info_flags: list[str],
) -> Optional[str]:
    """Return the JSON text of the internet configuration, or None if there is nothing."""
    if not (protocols or defaults or email_protocols or info_flags):
        return None
    config = InternetConfiguration(
        protocols=dict(protocols),
        defaults=dict(defaults),
        email_protocols=dict(email_protocols),
        info_flags=list(info_flags),
    )
    return config.to_json()


def _split_parts(flags_str: str):
    for part in flags_str.split(","):
        part = part.strip()
        if part:
            yield part


def parse_flags_with_config(flags_str: str) -> ParsedFlags:
    """Parse a comma-separated flags field and build its internet configuration."""
    result = ParsedFlags()
    if flags_str == "":
        return result

    protocols: dict[str, InternetProtocolDetail] = {}
    defaults: dict[str, str] = {}
    email_protocols: dict[str, EmailProtocolDetail] = {}
    info_flags: list[str] = []

    for part in _split_parts(flags_str):
        colon = part.find(":")
        if colon > 0:
            name = part[:colon].strip()
            value = part[colon + 1 :].strip()

            if name in _CONNECTION_PROTOCOLS:
                result.internet_protocols.append(name)
                detail = InternetProtocolDetail()
                if value:
                    address, port = parse_protocol_value(value)
                    if address:
                        detail.address = address
                        result.internet_hostnames.append(address)
                    if port > 0:
                        detail.port = port
                        result.internet_ports.append(port)
                    elif name in DEFAULT_PORTS and address:
                        detail.port = DEFAULT_PORTS[name]
                if detail.address or detail.port > 0:
                    protocols[name] = detail
            elif name == "INA":
                result.internet_protocols.append(name)
                if value:
                    defaults["INA"] = value
                    result.internet_hostnames.append(value)
            elif name == "IEM":
                if value:
                    defaults["IEM"] = value
                    result.internet_emails.append(value)
            elif name in _EMAIL_WITH_VALUE:
                email_detail = EmailProtocolDetail()
                if value:
                    email_detail.email = value
                    result.internet_emails.append(value)
                email_protocols[name] = email_detail
            elif name == "IP":
                result.internet_protocols.append(name)
                if value:
                    address, port = parse_protocol_value(value)
                    detail = InternetProtocolDetail()
                    if address:
                        detail.address = address
                        result.internet_hostnames.append(address)
                    if port > 0:
                        detail.port = port
                        result.internet_ports.append(port)
                    if detail.address or detail.port > 0:
                        protocols[name] = detail
            else:
                result.flags.append(part)
        elif part in _BARE_PROTOCOLS:
            result.internet_protocols.append(part)
            protocols[part] = InternetProtocolDetail(port=DEFAULT_PORTS.get(part, 0))
        elif part in _BARE_EMAIL_PROTOCOLS:
            email_protocols[part] = EmailProtocolDetail()
        elif part in _INFO_FLAGS:
            info_flags.append(part)
        elif part == "BND":
            result.internet_protocols.append("IBN")
            protocols.setdefault("IBN", InternetProtocolDetail(port=DEFAULT_PORTS["IBN"]))
        elif part == "TEL":
            result.internet_protocols.append("ITN")
            protocols.setdefault("ITN", InternetProtocolDetail(port=DEFAULT_PORTS["ITN"]))
        else:
            result.flags.append(part)

    result.internet_config = build_internet_config(
        protocols, defaults, email_protocols, info_flags
    )
    return result


def parse_advanced_flags(
    flags_str: str, flag_map: Optional[Mapping[str, ParserFlagInfo]] = None
) -> AdvancedFlags:
    """Categorise flags using the flag documentation map; every flag lands in all_flags."""
    if flag_map is None:
        flag_map = get_parser_flag_map()
    result = AdvancedFlags()
    if flag_map is None or flags_str == "":
        return result

    for part in _split_parts(flags_str):
        info = flag_map.get(part.split(":")[0])
        if info is not None:
            if info.category == "modem":
                result.modem_flags.append(part)
            elif info.category == "internet":
                colon = part.find(":")
                if colon > 0 and info.has_value:
                    name = part[:colon]
                    value = part[colon + 1 :]
                    result.internet_protocols.append(name)
                    if "." in value or ":" in value:
                        result.internet_hostnames.append(value)
                    else:
                        port = _to_int(value)
                        if port is not None:
                            result.internet_ports.append(port)
                    if name in _ADVANCED_EMAIL_FLAGS:
                        result.internet_emails.append(value)
                else:
                    result.internet_protocols.append(part)
        result.all_flags.append(part)
    return result


def convert_legacy_flags(flags_str: str) -> str:
    """Rewrite 1986-style colon flags to their modern names."""
    for old, new in LEGACY_FLAG_MAP.items():
        flags_str = flags_str.replace(old, new)
    return flags_str


def has_flag(flags: list[str], flag: str) -> bool:
    """Return True if the flag is in the list, ignoring case."""
    wanted = flag.lower()
    return any(item.lower() == wanted for item in flags)