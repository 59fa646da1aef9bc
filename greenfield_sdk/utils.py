"""
Utility functions for the Greenfield SDK.

This module provides common utility functions used across the SDK.
"""

import re

from greenfield_sdk.errors import GreenfieldInvalidNameError

MAX_OBJECT_NAME_BYTES = 1024
MIN_GROUP_NAME_LENGTH = 3
MAX_GROUP_NAME_LENGTH = 63

_BUCKET_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9.\-]{1,61}[a-z0-9]$")
_IP_ADDRESS_RE = re.compile(r"^(\d+\.){3}\d+$")


def format_size(size_bytes: int) -> str:
    """
    Format a size in bytes to a human-readable string.

    Args:
        size_bytes: Size in bytes

    Returns:
        str: Human-readable size string (e.g., '1.23 MB', '456.78 KB')
    """
    if size_bytes >= 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024 * 1024):.2f} GB"
    elif size_bytes >= 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.2f} MB"
    elif size_bytes >= 1024:
        return f"{size_bytes / 1024:.2f} KB"
    else:
        return f"{size_bytes} bytes"


def normalize_hex_string(hex_string: str) -> str:
    """
    Normalize a hex string by removing '0x' prefix if present.

    Args:
        hex_string: Hex string to normalize

    Returns:
        str: Normalized hex string without '0x' prefix
    """
    if isinstance(hex_string, str) and hex_string.startswith(("0x", "0X")):
        return hex_string[2:]
    return hex_string


def is_valid_hex(hex_string: str) -> bool:
    """
    Check if a string contains only valid hexadecimal characters.

    Args:
        hex_string: String to check

    Returns:
        bool: True if the string contains only valid hex characters
    """
    return all(c in "0123456789abcdefABCDEF" for c in hex_string)


def is_valid_address(address: str) -> bool:
    """
    Check if a string is a Greenfield account address (0x + 20 bytes hex).

    Args:
        address: String to check

    Returns:
        bool: True if it looks like a valid address
    """
    if not isinstance(address, str) or not address.startswith(("0x", "0X")):
        return False
    body = normalize_hex_string(address)
    return len(body) == 40 and is_valid_hex(body)


def verify_bucket_name(bucket_name: str) -> None:
    """
    Check a bucket name against the chain's naming rules.

    Bucket names are 3-63 characters of lowercase letters, digits, dots and
    hyphens, start and end with a letter or digit, and can't look like an IP
    address.

    Raises:
        GreenfieldInvalidNameError: If the name is not allowed
    """
    if not isinstance(bucket_name, str):
        raise GreenfieldInvalidNameError("Bucket name must be a string")
    if len(bucket_name) < 3 or len(bucket_name) > 63:
        raise GreenfieldInvalidNameError(
            f"Bucket name must be between 3 and 63 characters, got {len(bucket_name)}"
        )
    if _IP_ADDRESS_RE.match(bucket_name):
        raise GreenfieldInvalidNameError("Bucket name cannot be an IP address")
    if ".." in bucket_name or ".-" in bucket_name or "-." in bucket_name:
        raise GreenfieldInvalidNameError(
            f"Bucket name contains invalid character sequence: {bucket_name}"
        )
    if not _BUCKET_NAME_RE.match(bucket_name):
        raise GreenfieldInvalidNameError(
            f"Bucket name can only contain lowercase letters, digits, '.' and '-': {bucket_name}"
        )


def verify_object_name(object_name: str) -> None:
    """
    Check an object name against the chain's naming rules.

    Raises:
        GreenfieldInvalidNameError: If the name is not allowed
    """
    if not isinstance(object_name, str):
        raise GreenfieldInvalidNameError("Object name must be a string")
    if not object_name:
        raise GreenfieldInvalidNameError("Object name cannot be empty")
    if len(object_name.encode("utf-8")) > MAX_OBJECT_NAME_BYTES:
        raise GreenfieldInvalidNameError(
            f"Object name cannot be longer than {MAX_OBJECT_NAME_BYTES} bytes"
        )
    if "//" in object_name:
        raise GreenfieldInvalidNameError("Object name cannot contain '//'")
    if any(part in (".", "..") for part in object_name.split("/")):
        raise GreenfieldInvalidNameError(
            f"Object name cannot contain '.' or '..' path segments: {object_name}"
        )


def verify_group_name(group_name: str) -> None:
    """
    Check a group name against the chain's naming rules (3-63 characters).

    Raises:
        GreenfieldInvalidNameError: If the name is not allowed
    """
    if not isinstance(group_name, str):
        raise GreenfieldInvalidNameError("Group name must be a string")
    if len(group_name) < MIN_GROUP_NAME_LENGTH or len(group_name) > MAX_GROUP_NAME_LENGTH:
        raise GreenfieldInvalidNameError(
            f"Group name must be between {MIN_GROUP_NAME_LENGTH} and "
            f"{MAX_GROUP_NAME_LENGTH} characters, got {len(group_name)}"
        )
