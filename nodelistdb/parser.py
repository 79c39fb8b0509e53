"""Parsing of FidoNet nodelist files into node records."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import IntEnum
from pathlib import Path
from typing import Iterator, Optional, Union

from .flagparse import (
    convert_legacy_flags,
    has_flag,
    parse_advanced_flags,
    parse_flags_with_config,
)
from .flags import ParserFlagInfo, get_parser_flag_map
from .models import Node

PathLike = Union[str, "os.PathLike[str]"]

_INTEGER = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_ESCAPED_BYTE = re.compile("[\udc80-\udcff]")

_CRC = re.compile(r"CRC-?(\w+)", re.ASCII)
_HEX = re.compile(r"[0-9A-Fa-f]+")

_MODERN_HEADER = re.compile(
    r"(\w+),?\s+(\d{1,2})\s+(\w+)\s+(\d{4})\s+--\s+Day\s+number\s+(\d+)", re.ASCII
)
_DAY_FIRST_HEADER = re.compile(
    r"Day\s+number\s+(\d+)\s*:\s*\w+,?\s+(\w+)\s+(\d{1,2}),?\s+(\d{4})", re.ASCII
)
_YEARLESS_HEADER = re.compile(
    r"(\w+),?\s+(\d{1,2})\s+(\w+)\s+--\s+Day\s+number\s+(\d+)", re.ASCII
)
_DAY_ONLY = re.compile(r"[Dd]ay\s+(?:number\s+)?(\d+)", re.ASCII)
_ANY_YEAR = re.compile(r"(\d{4})", re.ASCII)

_FILE_DAY = re.compile(r"nodelist\.(\d{3})", re.ASCII | re.IGNORECASE)
_FILE_ZONE_DAY_YEAR = re.compile(r"z\d+-(\d{3})\.(\d{2})", re.ASCII | re.IGNORECASE)
_FILE_YEAR_DAY = re.compile(r"nodelist[_-](\d{4})[_-](\d{3})", re.ASCII | re.IGNORECASE)

_YEAR4 = re.compile(r"\b(19[8-9]\d|20[0-5]\d)\b", re.ASCII)
_YEAR2 = re.compile(r"\b([89]\d|[0-5]\d)\b", re.ASCII)

_DEFAULT_YEAR = 1989
_HEADER_SCAN_LINES = 20

_MONTHS = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sep": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}


class NodelistFormat(IntEnum):
    """Historical nodelist formats, oldest first."""

    FORMAT_1986 = 0
    FORMAT_1990 = 1
    FORMAT_2000 = 2
    FORMAT_2020 = 3


class ParseError(Exception):
    """Raised when a nodelist line, header or file cannot be parsed."""


@dataclass
class ParseContext:
    """Zone, net and region in effect while reading a nodelist."""

    current_zone: int = 1
    current_net: int = 1
    current_region: Optional[int] = None


@dataclass
class ParseResult:
    """The nodes of one nodelist file with the file's metadata."""

    nodes: list[Node]
    file_path: str
    nodelist_date: Optional[date] = None
    day_number: int = 0
    file_crc: int = 0
    processed_date: datetime = field(default_factory=datetime.now)


def _atoi(text: str) -> Optional[int]:
    """Parse a strict decimal integer within 64 bits; None if it is not one."""
    if not _INTEGER.fullmatch(text):
        return None
    number = int(text)
    if not _INT64_MIN <= number <= _INT64_MAX:
        return None
    return number


def _number(text: str) -> int:
    value = _atoi(text)
    return 0 if value is None else value


def _make_date(year: int, month: int, day: int) -> date:
    """Build a date, letting an out-of-range day roll over into later months."""
    try:
        return date(year, month, 1) + timedelta(days=day - 1)
    except (ValueError, OverflowError) as exc:
        raise ParseError(f"date out of range: {year}-{month}-{day}") from exc


def _year_in(line: str) -> int:
    match = _ANY_YEAR.search(line)
    if match:
        year = _number(match.group(1))
        if 1980 < year < 2100:
            return year
    return _DEFAULT_YEAR


def sanitize_utf8(text: Union[str, bytes]) -> str:
    """Return text with every invalid UTF-8 byte replaced by '?'."""
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("utf-8", "surrogateescape")
    if not _ESCAPED_BYTE.search(text):
        return text
    return _ESCAPED_BYTE.sub("?", text).replace("\ufffd", "?")


def parse_month(month_str: str) -> int:
    """Return the month number of an English month name or abbreviation, or 0."""
    return _MONTHS.get(month_str.lower(), 0)


def extract_year_from_path(file_path: PathLike) -> int:
    """Find a year in a path: four digits anywhere, else two in the file name; 0 if none."""
    path = os.fspath(file_path)
    match = _YEAR4.search(path)
    if match:
        return int(match.group(1))
    match = _YEAR2.search(os.path.basename(path))
    if match:
        year = int(match.group(1))
        return 2000 + year if year < 50 else 1900 + year
    return 0


def _dated(year: int, month_name: str, day: int, day_number: int) -> tuple[date, int]:
    month = parse_month(month_name)
    if month == 0:
        raise ParseError(f"invalid month: {month_name}")
    return _make_date(year, month, day), day_number


def extract_date_from_line(line: str) -> tuple[date, int]:
    """Return (date, day number) from a nodelist header line."""
    match = _MODERN_HEADER.search(line)
    if match:
        return _dated(
            _number(match.group(4)), match.group(3), _number(match.group(2)), _number(match.group(5))
        )

    match = _DAY_FIRST_HEADER.search(line)
    if match:
        return _dated(
            _number(match.group(4)), match.group(2), _number(match.group(3)), _number(match.group(1))
        )

    match = _YEARLESS_HEADER.search(line)
    if match:
        return _dated(
            _year_in(line), match.group(3), _number(match.group(2)), _number(match.group(4))
        )

    match = _DAY_ONLY.search(line)
    if match:
        day_number = _number(match.group(1))
        return _make_date(_year_in(line), 1, day_number), day_number

    raise ParseError("no date pattern found in line")


def _read_lines(data: bytes) -> Iterator[str]:
    """Yield the lines of raw file data, undecodable bytes escaped."""
    if not data:
        return
    lines = data.decode("utf-8", "surrogateescape").split("\n")
    if lines[-1] == "":
        lines.pop()
    for line in lines:
        yield line[:-1] if line.endswith("\r") else line


def extract_date_from_file(file_path: PathLike) -> tuple[date, int]:
    """Return (date, day number) from a nodelist's file name, else from its header."""
    path = os.fspath(file_path)
    filename = os.path.basename(path)

    match = _FILE_DAY.search(filename)
    if match:
        day_number = _number(match.group(1))
        year = extract_year_from_path(path) or _DEFAULT_YEAR
        return _make_date(year, 1, day_number), day_number

    match = _FILE_ZONE_DAY_YEAR.search(filename)
    if match:
        day_number = _number(match.group(1))
        year = _number(match.group(2))
        year += 2000 if year < 50 else 1900
        return _make_date(year, 1, day_number), day_number

    match = _FILE_YEAR_DAY.search(filename)
    if match:
        day_number = _number(match.group(2))
        return _make_date(_number(match.group(1)), 1, day_number), day_number

    data = Path(path).read_bytes()
    for count, line in enumerate(_read_lines(data), start=1):
        if count > _HEADER_SCAN_LINES:
            break
        if line.startswith((";A", ";S")):
            try:
                return extract_date_from_line(line)
            except ParseError:
                continue
    raise ParseError("no date found in filename or header")


def _parse_crc(line: str) -> Optional[int]:
    match = _CRC.search(line)
    if not match or not _HEX.fullmatch(match.group(1)):
        return None
    value = int(match.group(1), 16)
    return value if value <= 0xFFFF else None


def _require_int(text: str, message: str) -> int:
    value = _atoi(text)
    if value is None:
        raise ParseError(f"{message}: {text}")
    return value


class NodelistParser:
    """Reads nodelist files, tracking zone, net and region as it goes."""

    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose
        self.detected_format = NodelistFormat.FORMAT_1986
        self.context = ParseContext()
        self.modern_flag_map: dict[str, ParserFlagInfo] = get_parser_flag_map()

    def _log(self, message: str) -> None:
        if self.verbose:
            print(message)

    def detect_format(self, line: str) -> NodelistFormat:
        """Guess the nodelist format from the flags on a node line."""
        if "IBN" in line or "ITN" in line or "INA:" in line:
            return NodelistFormat.FORMAT_2020
        if "V34" in line or "V90" in line or "X75" in line:
            return NodelistFormat.FORMAT_2000
        if "XA" in line or "CM" in line or "MO" in line:
            return NodelistFormat.FORMAT_1990
        if "XP:" in line or "MO:" in line or "CM:" in line:
            return NodelistFormat.FORMAT_1986
        return NodelistFormat.FORMAT_1990

    def parse_line(
        self,
        line: str,
        nodelist_date: Optional[date],
        day_number: int,
        file_path: str = "",
    ) -> Node:
        """Parse one node entry line, updating the zone/net/region context."""
        line = sanitize_utf8(line)
        fields = line.split(",")
        if len(fields) < 7:
            raise ParseError(
                f"insufficient fields: expected at least 7, got {len(fields)}. Line: {line}"
            )

        type_str = fields[0].strip()
        num_str = fields[1].strip()
        if num_str.startswith("-"):
            num_str = num_str[1:]
        system_name = fields[2].strip()
        location = fields[3].strip()
        sysop_name = fields[4].strip()
        phone = fields[5].strip()
        max_speed = fields[6].strip()
        flags_str = ",".join(fields[7:]) if len(fields) > 7 else ""

        if self.detected_format == NodelistFormat.FORMAT_1986:
            flags_str = convert_legacy_flags(flags_str)

        ctx = self.context
        if not type_str:
            node_type = "Node"
            zone, net = ctx.current_zone, ctx.current_net
            node = _require_int(num_str, "invalid node number")
        else:
            kind = type_str.lower().title()
            if kind == "Zone":
                node_type = "Zone"
                zone = _require_int(num_str, "invalid zone number")
                net, node = zone, 0
                ctx.current_zone = zone
                ctx.current_net = zone
            elif kind == "Region":
                node_type = "Region"
                zone = ctx.current_zone
                net = _require_int(num_str, "invalid region number")
                node = 0
                ctx.current_net = net
                ctx.current_region = net
            elif kind == "Host":
                node_type = "Host"
                zone = ctx.current_zone
                net = _require_int(num_str, "invalid host net number")
                node = 0
                ctx.current_net = net
            elif kind == "Hub":
                node_type = "Hub"
                zone, net = ctx.current_zone, ctx.current_net
                node = _require_int(num_str, "invalid hub node number")
            elif kind in ("Pvt", "Hold", "Down"):
                node_type = kind
                zone, net = ctx.current_zone, ctx.current_net
                node = _require_int(num_str, f"invalid {type_str.lower()} node number")
            else:
                raise ParseError(f"unknown node type: {type_str}")

        parsed = parse_flags_with_config(flags_str)
        modem_flags = parse_advanced_flags(flags_str, self.modern_flag_map).modem_flags

        protocols = parsed.internet_protocols
        flag_list = parsed.flags
        has_binkp = (
            has_flag(protocols, "IBN")
            or has_flag(protocols, "BND")
            or has_flag(flag_list, "IBN")
            or has_flag(flag_list, "BND")
        )
        has_telnet = (
            has_flag(protocols, "ITN")
            or has_flag(protocols, "TEL")
            or has_flag(flag_list, "ITN")
            or has_flag(flag_list, "TEL")
        )
        has_inet = bool(protocols) or bool(parsed.internet_emails) or has_binkp or has_telnet
        is_down = node_type == "Down"
        is_hold = node_type == "Hold"

        return Node(
            zone=zone,
            net=net,
            node=node,
            nodelist_date=nodelist_date,
            day_number=day_number,
            system_name=system_name,
            location=location,
            sysop_name=sysop_name,
            phone=phone,
            node_type=node_type,
            region=ctx.current_region,
            max_speed=max_speed,
            is_cm=has_flag(flag_list, "CM"),
            is_mo=has_flag(flag_list, "MO"),
            has_binkp=has_binkp,
            has_inet=has_inet,
            has_telnet=has_telnet,
            is_down=is_down,
            is_hold=is_hold,
            is_pvt=node_type == "Pvt",
            is_active=not is_down and not is_hold,
            flags=flag_list,
            modem_flags=modem_flags,
            internet_protocols=protocols,
            internet_hostnames=parsed.internet_hostnames,
            internet_ports=parsed.internet_ports,
            internet_emails=parsed.internet_emails,
            internet_config=parsed.internet_config,
        )

    def parse_file(self, file_path: PathLike) -> list[Node]:
        """Parse a nodelist file and return its nodes."""
        return self.parse_file_with_crc(file_path).nodes

    def parse_file_with_crc(self, file_path: PathLike) -> ParseResult:
        """Parse a nodelist file and return its nodes, date, day number and CRC."""
        path = os.fspath(file_path)
        filename = os.path.basename(path)
        self._log(f"Parsing file: {filename}")

        year = extract_year_from_path(path)
        if year >= 1987:
            self.context.current_zone = 2
            self.context.current_net = 2
            self._log(
                f"  Year {year} detected: defaulting to Zone 2 for nodelists "
                "without explicit zone declaration"
            )

        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise ParseError(f"failed to open file {path}: {exc}") from exc

        nodes: list[Node] = []
        nodelist_date: Optional[date] = None
        day_number = 0
        file_crc = 0
        header_parsed = False
        format_detected = False
        tracker: dict[tuple[int, int, int], list[int]] = {}
        total_duplicates = 0
        conflict_groups = 0

        for line_num, raw in enumerate(_read_lines(data), start=1):
            if "\x1a" in raw:
                break
            line = raw.strip()
            if not line:
                continue

            if line.startswith((";A", ";S")):
                if not header_parsed:
                    try:
                        nodelist_date, day_number = extract_date_from_line(line)
                    except ParseError:
                        pass
                    else:
                        header_parsed = True
                        self._log(
                            f"  Header parsing successful: {nodelist_date.isoformat()} "
                            f"(Day {day_number}, CRC {file_crc})"
                        )
                crc = _parse_crc(line)
                if crc is not None:
                    file_crc = crc
                continue

            if line.startswith(";"):
                continue

            if not format_detected:
                format_detected = True
                self.detected_format = self.detect_format(line)
                self._log(f"Detected format: {self.detected_format.value}")

            try:
                node = self.parse_line(line, nodelist_date, day_number, path)
            except ParseError as exc:
                self._log(
                    f"Warning: Failed to parse line {line_num} in {filename} "
                    f"(Full path: {path}): {exc}"
                )
                continue

            key = (node.zone, node.net, node.node)
            previous = tracker.get(key)
            if previous:
                self._log(
                    f"  DUPLICATE DETECTED: Node {node.address} appears multiple times "
                    f"in {path} (line {line_num})"
                )
                self._log(f"    Previous occurrences at indices: {previous}")
                self._log(
                    f"    System Name: '{node.system_name}', Location: '{node.location}'"
                )
                node.conflict_sequence = len(previous)
                node.has_conflict = True
                for index in previous:
                    nodes[index].has_conflict = True
                total_duplicates += 1
                if len(previous) == 1:
                    conflict_groups += 1
                previous.append(len(nodes))
            else:
                tracker[key] = [len(nodes)]
            nodes.append(node)

        if nodelist_date is None:
            try:
                nodelist_date, day_number = extract_date_from_file(path)
            except (ParseError, OSError):
                nodelist_date, day_number = None, 0

        if self.verbose:
            shown = nodelist_date.isoformat() if nodelist_date else "unknown"
            print(
                f"Parsed {len(nodes)} nodes from {filename} "
                f"(Format: {self.detected_format.value})"
            )
            print(f"  File: {path}")
            print(f"  Date: {shown} (Day {day_number})")
            if total_duplicates:
                print(
                    f"  DUPLICATES FOUND: {total_duplicates} duplicate entries "
                    f"across {conflict_groups} nodes"
                )
                print("     These duplicates have been preserved with conflict tracking")
            else:
                print("  No duplicate node addresses found in this file")

        return ParseResult(
            nodes=nodes,
            file_path=path,
            nodelist_date=nodelist_date,
            day_number=day_number,
            file_crc=file_crc,
        )