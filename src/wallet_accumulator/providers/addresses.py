"""Syntactic wallet address classification used by providers to self-select wallets."""

import re

_BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_BASE58_INDEX = {char: index for index, char in enumerate(_BASE58_ALPHABET)}

_EVM_PATTERN = re.compile(r"0x[0-9a-fA-F]{40}")
_BECH32_PATTERN = re.compile(r"bc1[02-9ac-hj-np-z]{11,71}", re.IGNORECASE)

SOLANA_PUBKEY_LENGTH = 32
BITCOIN_LEGACY_PAYLOAD_LENGTH = 25


def base58_decode(value: str) -> bytes:
    """
    Decode a base58 (Bitcoin alphabet) string.

    Raises
    ------
    ValueError
        If the string contains a character outside the alphabet

    """
    if not value:
        return b""
    num = 0
    for char in value:
        if char not in _BASE58_INDEX:
            raise ValueError("Invalid base58 character")
        num = num * 58 + _BASE58_INDEX[char]
    combined = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
    pad = len(value) - len(value.lstrip("1"))
    return b"\x00" * pad + combined


def _base58_length(value: str) -> int | None:
    try:
        return len(base58_decode(value))
    except ValueError:
        return None


def is_evm_address(address: str) -> bool:
    """0x followed by 40 hex digits."""
    return _EVM_PATTERN.fullmatch(address) is not None


def is_solana_address(address: str) -> bool:
    """Base58 string of plausible length that decodes to a 32-byte public key."""
    if not 32 <= len(address) <= 44:
        return False
    return _base58_length(address) == SOLANA_PUBKEY_LENGTH


def is_bitcoin_address(address: str) -> bool:
    """Bech32 ``bc1`` address, or a legacy ``1``/``3`` base58 address of 25 bytes."""
    if address.lower().startswith("bc1"):
        return _BECH32_PATTERN.fullmatch(address) is not None
    if address[:1] in ("1", "3") and 26 <= len(address) <= 35:
        return _base58_length(address) == BITCOIN_LEGACY_PAYLOAD_LENGTH
    return False
