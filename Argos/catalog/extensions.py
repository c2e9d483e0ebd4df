from __future__ import annotations

from typing import Tuple

from Argos.catalog.models import ExtensionRule

EXTENSION_RULES: Tuple[ExtensionRule, ...] = (
    # --- Password managers ---
    ExtensionRule("kdbx", 80, "password-database"),
    ExtensionRule("kdb", 75, "password-database"),
    ExtensionRule("psafe3", 75, "password-database"),
    ExtensionRule("opvault", 70, "password-database"),
    ExtensionRule("agilekeychain", 70, "password-database"),
    ExtensionRule("1pif", 70, "password-database", binary=False),

    # --- Key material ---
    ExtensionRule("ppk", 80, "private-key", binary=False),
    ExtensionRule("pem", 60, "private-key", binary=False),
    ExtensionRule("key", 60, "private-key", binary=False),
    ExtensionRule("pfx", 70, "keystore"),
    ExtensionRule("p12", 70, "keystore"),
    ExtensionRule("jks", 65, "keystore"),
    ExtensionRule("keystore", 65, "keystore"),
    ExtensionRule("gpg", 50, "encrypted-file"),
    ExtensionRule("pgp", 50, "encrypted-file"),
    ExtensionRule("asc", 35, "private-key", binary=False),

    # --- Wallets ---
    ExtensionRule("wallet", 70, "wallet"),

    # --- Kerberos / Windows credentials ---
    ExtensionRule("kirbi", 85, "kerberos-ticket"),
    ExtensionRule("ccache", 80, "kerberos-ticket"),
    ExtensionRule("dmp", 35, "memory-dump"),
    ExtensionRule("hiv", 50, "registry-hive"),

    # --- Remote access configs ---
    ExtensionRule("rdp", 45, "remote-access", binary=False),
    ExtensionRule("ovpn", 50, "remote-access", binary=False),
    ExtensionRule("rdg", 55, "remote-access", binary=False),
    ExtensionRule("vnc", 45, "remote-access", binary=False),

    # --- Mail stores ---
    ExtensionRule("pst", 35, "mailbox"),
    ExtensionRule("ost", 30, "mailbox"),

    # --- Config files that commonly hold secrets ---
    ExtensionRule("env", 40, "config", binary=False),
    ExtensionRule("tfstate", 55, "config", binary=False),
    ExtensionRule("pgpass", 60, "config", binary=False),
)

__all__ = ["EXTENSION_RULES"]
