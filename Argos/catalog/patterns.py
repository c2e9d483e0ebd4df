from __future__ import annotations

import re
from typing import Tuple

from Argos.catalog.models import PatternKind, SecretPattern

# Structural secret patterns for common credential formats.
# Keep patterns PRECOMPILED for performance; keep them strict enough to reduce noise.

STRUCTURAL_PATTERNS: Tuple[SecretPattern, ...] = (
    # --- AWS ---
    # Access Key ID: "AKIA" (long-term) or "ASIA" (STS) followed by 16 uppercase alphanumerics
    SecretPattern("AWS_ACCESS_KEY_ID", 85, regex=re.compile(r"\b(?:AKIA|ASIA)[0-9A-Z]{16}\b")),

    # --- GitHub ---
    # Classic and fine-grained personal access tokens, OAuth and app tokens
    SecretPattern("GITHUB_TOKEN", 90, regex=re.compile(r"\bgh[pousr]_[0-9a-zA-Z]{36}\b")),
    SecretPattern("GITHUB_FINE_GRAINED_TOKEN", 90, regex=re.compile(r"\bgithub_pat_[0-9a-zA-Z_]{82}\b")),

    # --- GCP ---
    # API key; starts with "AIza" and is 39 characters long.
    SecretPattern("GCP_API_KEY", 80, regex=re.compile(r"\bAIza[0-9A-Za-z\-_]{35}\b")),

    # --- Azure ---
    # Storage account connection string with an inline key
    SecretPattern(
        "AZURE_STORAGE_CONNECTION_STRING", 90,
        regex=re.compile(r"AccountKey=[A-Za-z0-9+/]{80,}={0,2}", re.IGNORECASE),
    ),

    # --- JWT ---
    # header.payload.signature, URL-safe base64 segments
    SecretPattern("JWT", 60, regex=re.compile(r"\beyJ[a-zA-Z0-9_-]+\.eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]*")),

    # --- Slack ---
    SecretPattern("SLACK_TOKEN", 85, regex=re.compile(r"\bxox[baprs]-[0-9A-Za-z-]{10,}\b")),

    # --- Stripe ---
    # Live secret and restricted keys (test keys use sk_test_ and are not reported)
    SecretPattern("STRIPE_SECRET_KEY", 90, regex=re.compile(r"\b[sr]k_live_[0-9A-Za-z]{16,99}\b")),

    # --- OpenAI ---
    SecretPattern("OPENAI_API_KEY", 85, regex=re.compile(r"\bsk-(?:proj-)?[0-9a-zA-Z_-]{40,}\b")),

    # --- Private key bodies pasted into other files ---
    SecretPattern(
        "PRIVATE_KEY_BLOCK", 90,
        regex=re.compile(r"-----BEGIN (?:RSA |EC |DSA |OPENSSH |ENCRYPTED |PGP )?PRIVATE KEY(?: BLOCK)?-----"),
    ),

    # --- Generic credentials ---
    # user:password embedded in a URL
    SecretPattern(
        "URL_EMBEDDED_CREDENTIALS", 70,
        regex=re.compile(r"\b[a-z][a-z0-9+.-]*://[^\s:/@]+:[^\s:/@]{3,}@[^\s/]+", re.IGNORECASE),
    ),
    # Unattend.xml / Group Policy Preferences style password elements
    SecretPattern(
        "XML_PASSWORD_ELEMENT", 55,
        regex=re.compile(r"<(?:Password|AdministratorPassword)>\s*<Value>[^<]{4,}</Value>", re.IGNORECASE),
    ),
    SecretPattern("GPP_CPASSWORD", 85, regex=re.compile(r"\bcpassword=\"[A-Za-z0-9+/=]{20,}\"")),
)

# Entropy-triggered patterns. A token of the charset is scored with the
# sliding-window estimator; threshold None uses the configured threshold.
ENTROPY_PATTERNS: Tuple[SecretPattern, ...] = (
    SecretPattern(
        "HIGH_ENTROPY_STRING", 40,
        kind=PatternKind.ENTROPY,
        # No "/" or "." so paths and URLs break into per-segment tokens
        charset=re.compile(r"[A-Za-z0-9+=_\-~]+"),
        min_length=20,
    ),
    # Hex has at most 4 bits per character, so it gets its own threshold
    SecretPattern(
        "HIGH_ENTROPY_HEX", 30,
        kind=PatternKind.ENTROPY,
        charset=re.compile(r"[0-9a-fA-F]+"),
        threshold=3.5,
        min_length=32,
    ),
)

SECRET_PATTERNS: Tuple[SecretPattern, ...] = STRUCTURAL_PATTERNS + ENTROPY_PATTERNS

__all__ = ["ENTROPY_PATTERNS", "SECRET_PATTERNS", "STRUCTURAL_PATTERNS"]
