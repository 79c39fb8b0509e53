"""Documentation and categorisation of FidoNet nodelist flags."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FlagInfo:
    """Metadata about a nodelist flag."""

    category: str
    has_value: bool
    description: str

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "has_value": self.has_value,
            "description": self.description,
        }


@dataclass(frozen=True)
class ParserFlagInfo:
    """The part of a flag's metadata the parser needs."""

    category: str
    has_value: bool


_FLAG_TABLE: tuple[tuple[str, str, bool, str], ...] = (
    # Modem flags
    ("V21", "modem", False, "ITU-T V.21 (300 bps, full-duplex, FSK modulation)"),
    ("V22", "modem", False, "ITU-T V.22 (1200 bps, full-duplex, QAM modulation)"),
    ("V29", "modem", False, "ITU-T V.29 (9600 bps, half-duplex, used for fax and data)"),
    ("V32", "modem", False, "ITU-T V.32 (9600 bps, full-duplex, QAM modulation)"),
    ("V32B", "modem", False, "ITU-T V.32bis (14400 bps, full-duplex, QAM modulation)"),
    ("V33", "modem", False, "ITU-T V.33 (14400 bps, half-duplex, data/fax transmission)"),
    ("V34", "modem", False, "ITU-T V.34 (up to 28800 bps, full-duplex, advanced QAM modulation)"),
    ("V42", "modem", False, "ITU-T V.42 (LAPM error correction protocol)"),
    ("V42B", "modem", False, "ITU-T V.42bis (data compression, up to 4:1 ratio)"),
    ("V90C", "modem", False, "ITU-T V.90 (56 kbps, client side, analog download)"),
    ("V90S", "modem", False, "ITU-T V.90 (56 kbps, server side, digital upload)"),
    ("X75", "modem", False, "ITU-T X.75 (ISDN B-channel protocol, 64 kbps)"),
    ("HST", "modem", False, "USRobotics HST (High-Speed Transfer, proprietary, 9600-14400 bps)"),
    ("H96", "modem", False, "USRobotics HST 9600 (early HST modem, 9600 bps)"),
    ("H14", "modem", False, "USRobotics HST 14400 (improved speed variant, 14400 bps)"),
    ("H16", "modem", False, "USRobotics HST 16800 (advanced speed variant, 16800 bps)"),
    ("MAX", "modem", False, "Microcom AX/96xx series (proprietary modulation, 9600 bps+)"),
    ("PEP", "modem", False, "Packet Ensemble Protocol (proprietary error correction and modulation)"),
    ("CSP", "modem", False, "Compucom SpeedModem (CSP, proprietary protocol)"),
    ("ZYX", "modem", False, "ZyXEL modem (supports proprietary and standard protocols)"),
    ("VFC", "modem", False, "V.Fast Class (V.FC, pre-V.34 28800 bps, Rockwell standard)"),
    # Internet flags
    ("IBN", "internet", True, "BinkP"),
    ("IFC", "internet", True, "File transfer"),
    ("ITN", "internet", True, "Telnet"),
    ("IVM", "internet", True, "VModem"),
    ("IFT", "internet", True, "FTP"),
    ("INA", "internet", True, "Internet address"),
    ("IP", "internet", True, "General IP"),
    # Email protocols
    ("IEM", "internet", True, "Email"),
    ("IMI", "internet", True, "Mail interface"),
    ("ITX", "internet", True, "TransX"),
    ("IUC", "internet", True, "UUencoded"),
    ("ISE", "internet", True, "SendEmail"),
    # Capability flags
    ("CM", "capability", False, "Continuous Mail"),
    ("MO", "capability", False, "Mail Only"),
    ("LO", "capability", False, "Local Only"),
    ("XA", "capability", False, "Extended addressing"),
    ("XB", "capability", False, "Bark requests"),
    ("XC", "capability", False, "Compressed mail"),
    ("XP", "capability", False, "Extended protocol"),
    ("XR", "capability", False, "Accepts file requests"),
    ("XW", "capability", False, "X.75 windowing"),
    ("XX", "capability", False, "No file/update requests"),
    # Schedule flags
    ("U", "schedule", True, "Availability"),
    ("T", "schedule", True, "Time zone"),
    # User flags
    ("ENC", "user", False, "Encrypted"),
    ("NC", "user", False, "Network Coordinator"),
    ("NEC", "user", False, "Net Echomail Coordinator"),
    ("REC", "user", False, "Region Echomail Coordinator"),
    ("ZEC", "user", False, "Zone Echomail Coordinator"),
    ("PING", "user", False, "Ping OK"),
    ("RPK", "user", False, "Regional Pointlist Keeper"),
)


def get_flag_descriptions() -> dict[str, FlagInfo]:
    """Return a fresh map of every documented flag to its metadata."""
    return {
        name: FlagInfo(category=category, has_value=has_value, description=description)
        for name, category, has_value, description in _FLAG_TABLE
    }


def get_parser_flag_map() -> dict[str, ParserFlagInfo]:
    """Return the flag map without descriptions, as used by the parser."""
    return {
        name: ParserFlagInfo(category=info.category, has_value=info.has_value)
        for name, info in get_flag_descriptions().items()
    }