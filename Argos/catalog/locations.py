from __future__ import annotations

from typing import Tuple

from Argos.catalog.models import LocationRule

# Globs are anchored at the volume root (drive letter removed) and matched
# case-insensitively, one path segment at a time.
LOCATION_RULES: Tuple[LocationRule, ...] = (
    # --- Windows system secrets ---
    LocationRule(r"{SYSTEMROOT}\System32\config\SAM", "Windows SAM hive", 90, "registry-hive"),
    LocationRule(r"{SYSTEMROOT}\System32\config\SECURITY", "Windows SECURITY hive", 85, "registry-hive"),
    LocationRule(r"{SYSTEMROOT}\System32\config\SYSTEM", "Windows SYSTEM hive", 70, "registry-hive"),
    LocationRule(r"{SYSTEMROOT}\NTDS\ntds.dit", "Active Directory database", 95, "credential-store"),
    LocationRule(r"{SYSTEMROOT}\Panther\Unattend*.xml", "Windows unattended setup", 60, "config"),
    LocationRule(r"{SYSTEMROOT}\System32\Sysprep\unattend.xml", "Windows unattended setup", 60, "config"),
    LocationRule(r"{USERPROFILE}\NTUSER.DAT", "Windows user hive", 40, "registry-hive"),

    # --- DPAPI / Credential Manager ---
    LocationRule(r"{APPDATA}\Microsoft\Credentials\*", "Windows Credential Manager", 75, "credential-blob"),
    LocationRule(r"{LOCALAPPDATA}\Microsoft\Credentials\*", "Windows Credential Manager", 75, "credential-blob"),
    LocationRule(r"{APPDATA}\Microsoft\Protect\**\*", "DPAPI master keys", 70, "credential-blob"),
    LocationRule(r"{LOCALAPPDATA}\Microsoft\Vault\**\*.vcrd", "Windows Vault", 70, "credential-blob"),

    # --- Browsers ---
    LocationRule(r"{LOCALAPPDATA}\Google\Chrome\User Data\*\Login Data", "Google Chrome", 80, "browser-credentials"),
    LocationRule(r"{LOCALAPPDATA}\Google\Chrome\User Data\Local State", "Google Chrome", 50, "browser-credentials"),
    LocationRule(r"{LOCALAPPDATA}\Microsoft\Edge\User Data\*\Login Data", "Microsoft Edge", 80, "browser-credentials"),
    LocationRule(r"{LOCALAPPDATA}\BraveSoftware\Brave-Browser\User Data\*\Login Data", "Brave", 80,
                 "browser-credentials"),
    LocationRule(r"{APPDATA}\Mozilla\Firefox\Profiles\*\logins.json", "Mozilla Firefox", 80, "browser-credentials"),
    LocationRule(r"{APPDATA}\Mozilla\Firefox\Profiles\*\key4.db", "Mozilla Firefox", 75, "browser-credentials"),

    # --- Messaging ---
    LocationRule(r"{APPDATA}\Telegram Desktop\tdata\**\*", "Telegram Desktop", 65, "messaging-data"),

    # --- File transfer / remote access ---
    LocationRule(r"{APPDATA}\FileZilla\sitemanager.xml", "FileZilla", 75, "remote-access"),
    LocationRule(r"{APPDATA}\FileZilla\recentservers.xml", "FileZilla", 70, "remote-access"),
    LocationRule(r"{APPDATA}\mRemoteNG\confCons.xml", "mRemoteNG", 75, "remote-access"),

    # --- Developer credentials ---
    LocationRule(r"{USERPROFILE}\.ssh\id_*", "OpenSSH", 85, "private-key"),
    LocationRule(r"{USERPROFILE}\.aws\credentials", "AWS CLI", 85, "cloud-credentials"),
    LocationRule(r"{USERPROFILE}\.azure\**\*.json", "Azure CLI", 60, "cloud-credentials"),
    LocationRule(r"{APPDATA}\gcloud\**\credentials.db", "Google Cloud SDK", 75, "cloud-credentials"),
    LocationRule(r"{USERPROFILE}\.git-credentials", "Git credential store", 85, "cloud-credentials"),
    LocationRule(r"{USERPROFILE}\.docker\config.json", "Docker", 55, "cloud-credentials"),
    LocationRule(r"{USERPROFILE}\.kube\config", "kubectl", 65, "cloud-credentials"),

    # --- Wallets ---
    LocationRule(r"{APPDATA}\Bitcoin\wallet.dat", "Bitcoin Core", 90, "wallet"),
    LocationRule(r"{APPDATA}\Bitcoin\wallets\**\wallet.dat", "Bitcoin Core", 90, "wallet"),
    LocationRule(r"{APPDATA}\Electrum\wallets\*", "Electrum", 85, "wallet"),

    # --- Synced folders (overlap with every rule above) ---
    LocationRule(r"{USERPROFILE}\OneDrive\**\*.kdbx", "OneDrive synced vault", 40, "password-database"),
    LocationRule(r"{USERPROFILE}\Dropbox\**\*.kdbx", "Dropbox synced vault", 40, "password-database"),
)

__all__ = ["LOCATION_RULES"]
