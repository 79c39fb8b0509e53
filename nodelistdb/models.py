"""Data records for nodes, filters, statistics and changes."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Optional


@dataclass
class InternetProtocolDetail:
    """Address and port of one internet protocol."""

    address: str = ""
    port: int = 0

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.address:
            result["address"] = self.address
        if self.port:
            result["port"] = self.port
        return result


@dataclass
class EmailProtocolDetail:
    """Address of one e-mail based protocol."""

    email: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"email": self.email} if self.email else {}


@dataclass
class InternetConfiguration:
    """Structured internet configuration of a node."""

    protocols: dict[str, InternetProtocolDetail] = field(default_factory=dict)
    defaults: dict[str, str] = field(default_factory=dict)
    email_protocols: dict[str, EmailProtocolDetail] = field(default_factory=dict)
    info_flags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form; empty sections are left out, map keys sorted."""
        result: dict[str, Any] = {}
        if self.protocols:
            result["protocols"] = {
                name: self.protocols[name].to_dict() for name in sorted(self.protocols)
            }
        if self.defaults:
            result["defaults"] = {name: self.defaults[name] for name in sorted(self.defaults)}
        if self.email_protocols:
            result["email_protocols"] = {
                name: self.email_protocols[name].to_dict()
                for name in sorted(self.email_protocols)
            }
        if self.info_flags:
            result["info_flags"] = list(self.info_flags)
        return result

    def to_json(self) -> str:
        """Return the compact JSON text of this configuration."""
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)


@dataclass
class Node:
    """One FidoNet node entry of a nodelist."""

    zone: int
    net: int
    node: int
    nodelist_date: Optional[date] = None
    day_number: int = 0
    system_name: str = ""
    location: str = ""
    sysop_name: str = ""
    phone: str = ""
    node_type: str = ""
    region: Optional[int] = None
    max_speed: str = ""
    is_cm: bool = False
    is_mo: bool = False
    has_binkp: bool = False
    has_inet: bool = False
    has_telnet: bool = False
    is_down: bool = False
    is_hold: bool = False
    is_pvt: bool = False
    is_active: bool = False
    flags: list[str] = field(default_factory=list)
    modem_flags: list[str] = field(default_factory=list)
    internet_protocols: list[str] = field(default_factory=list)
    internet_hostnames: list[str] = field(default_factory=list)
    internet_ports: list[int] = field(default_factory=list)
    internet_emails: list[str] = field(default_factory=list)
    internet_config: Optional[str] = None
    conflict_sequence: int = 0
    has_conflict: bool = False

    @property
    def address(self) -> str:
        return f"{self.zone}:{self.net}/{self.node}"

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form of the node."""
        result: dict[str, Any] = {
            "zone": self.zone,
            "net": self.net,
            "node": self.node,
            "nodelist_date": self.nodelist_date.isoformat() if self.nodelist_date else None,
            "day_number": self.day_number,
            "system_name": self.system_name,
            "location": self.location,
            "sysop_name": self.sysop_name,
            "phone": self.phone,
            "node_type": self.node_type,
        }
        if self.region is not None:
            result["region"] = self.region
        result.update(
            {
                "max_speed": self.max_speed,
                "is_cm": self.is_cm,
                "is_mo": self.is_mo,
                "has_binkp": self.has_binkp,
                "has_inet": self.has_inet,
                "has_telnet": self.has_telnet,
                "is_down": self.is_down,
                "is_hold": self.is_hold,
                "is_pvt": self.is_pvt,
                "is_active": self.is_active,
                "flags": list(self.flags),
                "modem_flags": list(self.modem_flags),
                "internet_protocols": list(self.internet_protocols),
                "internet_hostnames": list(self.internet_hostnames),
                "internet_ports": list(self.internet_ports),
                "internet_emails": list(self.internet_emails),
            }
        )
        if self.internet_config:
            result["internet_config"] = json.loads(self.internet_config)
        result["conflict_sequence"] = self.conflict_sequence
        result["has_conflict"] = self.has_conflict
        return result


@dataclass
class NodeFilter:
    """Search criteria for nodes; None means the criterion is not applied."""

    zone: Optional[int] = None
    net: Optional[int] = None
    node: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    system_name: Optional[str] = None
    location: Optional[str] = None
    sysop_name: Optional[str] = None
    node_type: Optional[str] = None
    is_cm: Optional[bool] = None
    is_mo: Optional[bool] = None
    has_binkp: Optional[bool] = None
    has_telnet: Optional[bool] = None
    is_active: Optional[bool] = None
    latest_only: Optional[bool] = None
    limit: int = 0
    offset: int = 0


@dataclass
class RegionInfo:
    """Node count of one region."""

    zone: int
    region: int
    node_count: int
    name: str = ""


@dataclass
class NetInfo:
    """Node count of one net."""

    zone: int
    net: int
    node_count: int
    name: str = ""


@dataclass
class NetworkStats:
    """Aggregated statistics of one nodelist date."""

    date: date
    total_nodes: int = 0
    active_nodes: int = 0
    cm_nodes: int = 0
    mo_nodes: int = 0
    binkp_nodes: int = 0
    telnet_nodes: int = 0
    pvt_nodes: int = 0
    down_nodes: int = 0
    hold_nodes: int = 0
    internet_nodes: int = 0
    zone_distribution: dict[int, int] = field(default_factory=dict)
    largest_regions: list[RegionInfo] = field(default_factory=list)
    largest_nets: list[NetInfo] = field(default_factory=list)


@dataclass
class ProcessingResult:
    """Outcome of processing one nodelist file."""

    nodelist_date: date
    day_number: int = 0
    nodes_found: int = 0
    nodes_inserted: int = 0
    processing_time: timedelta = field(default_factory=timedelta)
    error: Optional[Exception] = None


@dataclass
class NodeChange:
    """A change in a node's data between two nodelist dates."""

    date: date
    day_number: int
    change_type: str
    changes: dict[str, str] = field(default_factory=dict)
    old_node: Optional[Node] = None
    new_node: Optional[Node] = None