"""
Configuration

Loads Canvas connection settings from the environment (and .env files) and
optional anonymization policy extensions from YAML.
"""

import os
import re
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from .anonymizer import DEFAULT_POLICY, AnonymizationPolicy
from .exceptions import ConfigurationError, ValidationError

logger = logging.getLogger("canvas_bridge.config")

# Valid domain pattern
DOMAIN_PATTERN = re.compile(r'^[a-zA-Z0-9][a-zA-Z0-9\-\.]*[a-zA-Z0-9]$')


def load_env() -> Optional[Path]:
    """Load .env from current dir, parent dirs, package root, or home dir."""
    locations = [Path.cwd() / ".env"]

    # Search up directory tree for .env
    current = Path.cwd()
    for _ in range(10):  # Limit to 10 levels up
        parent = current.parent
        if parent == current:
            break
        locations.append(parent / ".env")
        current = parent

    locations.extend([
        Path(__file__).parent.parent / ".env",  # Package root
        Path.home() / ".canvas-bridge.env",  # Home directory
    ])

    for env_file in locations:
        if env_file.exists():
            load_dotenv(env_file, override=True)
            logger.debug(f"Loaded environment from {env_file}")
            return env_file
    return None


def validate_domain(domain: Optional[str]) -> None:
    """Validate Canvas domain format."""
    if not domain:
        raise ConfigurationError(
            "CANVAS_DOMAIN not set.\n"
            "Set it in your .env file or environment:\n"
            "  CANVAS_DOMAIN=canvas.instructure.com\n"
            "or give the full URL with CANVAS_BASE_URL."
        )
    if not DOMAIN_PATTERN.match(domain):
        raise ValidationError(f"Invalid Canvas domain format: {domain}")


def validate_token(token: Optional[str]) -> None:
    """Validate Canvas API token."""
    if not token:
        raise ConfigurationError(
            "CANVAS_API_TOKEN not set.\n"
            "Set it in your .env file or environment:\n"
            "  CANVAS_API_TOKEN=your_token_here\n"
            "Generate a token at: https://<your-domain>/profile/settings"
        )


def resolve_base_url(base_url: Optional[str] = None, domain: Optional[str] = None) -> str:
    """
    Work out the Canvas base URL.

    A full base URL wins; otherwise the domain is validated and ``https://``
    is prepended.
    """
    if base_url:
        if not base_url.startswith(("http://", "https://")):
            raise ValidationError(f"Invalid Canvas base URL (missing scheme): {base_url}")
        return base_url.rstrip("/")
    validate_domain(domain)
    return f"https://{domain}"


def load_policy(path: Optional[str]) -> AnonymizationPolicy:
    """
    Build an anonymization policy from a YAML file of per-shape extensions.

    The file maps a record shape to extra ``strip`` and ``mask`` field lists:

        user:
          strip: [phone]
          mask: [nickname]

    Args:
        path: YAML file path, or None for the default policy

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    if not path:
        return DEFAULT_POLICY

    policy_path = Path(path).expanduser()
    try:
        with open(policy_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"Cannot read anonymization policy {policy_path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in anonymization policy {policy_path}: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Anonymization policy {policy_path} must map shapes to field lists")

    policy = DEFAULT_POLICY
    for shape, fields in data.items():
        if not isinstance(fields, dict):
            raise ConfigurationError(f"Policy entry for '{shape}' must have 'strip' and/or 'mask' lists")
        try:
            policy = policy.extend(
                str(shape),
                strip=fields.get("strip") or (),
                mask=fields.get("mask") or (),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid anonymization policy {policy_path}: {e}")
    logger.info(f"Loaded anonymization policy extensions for: {', '.join(map(str, data))}")
    return policy


@dataclass(frozen=True)
class Settings:
    """Resolved connection settings."""

    base_url: str
    token: str
    timeout: Optional[float] = None
    policy: AnonymizationPolicy = DEFAULT_POLICY

    def __repr__(self) -> str:
        return f"Settings(base_url={self.base_url!r}, timeout={self.timeout!r})"


def _parse_timeout(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        timeout = float(value)
    except ValueError:
        raise ValidationError(f"CANVAS_TIMEOUT must be a number of seconds, got: {value}")
    if timeout <= 0:
        raise ValidationError(f"CANVAS_TIMEOUT must be positive, got: {value}")
    return timeout


def load_settings(environ: Optional[Dict[str, Any]] = None) -> Settings:
    """
    Read settings from the environment.

    Variables:
        CANVAS_BASE_URL: Full Canvas URL (e.g. https://school.instructure.com)
        CANVAS_DOMAIN: Canvas host, used when CANVAS_BASE_URL is unset
        CANVAS_API_TOKEN: API token
        CANVAS_TIMEOUT: Optional request timeout in seconds
        CANVAS_ANONYMIZATION_POLICY: Optional YAML policy extension file

    Raises:
        ConfigurationError: If credentials are missing
        ValidationError: If a value is malformed
    """
    env = os.environ if environ is None else environ
    base_url = resolve_base_url(env.get("CANVAS_BASE_URL"), env.get("CANVAS_DOMAIN"))
    token = env.get("CANVAS_API_TOKEN")
    validate_token(token)
    return Settings(
        base_url=base_url,
        token=token,
        timeout=_parse_timeout(env.get("CANVAS_TIMEOUT")),
        policy=load_policy(env.get("CANVAS_ANONYMIZATION_POLICY")),
    )
