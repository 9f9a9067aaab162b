"""
Environment variable loading for the Genesis client.

- GENESIS_RPC_URL: JSON-RPC endpoint of the wallet / node (default: local Hardhat node)
- GENESIS_CONTRACT_ADDRESS: deployed Genesis contract address
- GENESIS_CONTRACT_ADDRESS_FILE: contractAddress.json ({"address": "0x..."}), used when the address is unset
- GENESIS_ABI_PATH: Hardhat artifact (Genesis.json with an "abi" key); embedded ABI otherwise
- GENESIS_POLL_INTERVAL_SECONDS: account / chain change polling interval
- Loads .env from project root when available.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from genesis_client.core.exceptions import ConfigurationError

# config is genesis_client/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_RPC_URL = "http://127.0.0.1:8545"
DEFAULT_POLL_INTERVAL_SEC = 2.0


def load_genesis_env() -> None:
    """Load .env from project root. Safe to call multiple times; existing env wins."""
    from dotenv import load_dotenv

    load_dotenv(_ENV_PATH, override=False)


def get_rpc_url() -> str:
    load_genesis_env()
    return (os.getenv("GENESIS_RPC_URL") or "").strip() or DEFAULT_RPC_URL


def get_contract_address() -> str:
    """
    Resolve the Genesis contract address.
    Order: GENESIS_CONTRACT_ADDRESS > GENESIS_CONTRACT_ADDRESS_FILE. Empty string if neither is set.
    """
    load_genesis_env()
    address = (os.getenv("GENESIS_CONTRACT_ADDRESS") or "").strip()
    if address:
        return address
    path = (os.getenv("GENESIS_CONTRACT_ADDRESS_FILE") or "").strip()
    if not path:
        return ""
    data = _read_json(Path(path))
    address = str(data.get("address") or "").strip() if isinstance(data, dict) else ""
    if not address:
        raise ConfigurationError(f"{path} has no 'address' entry")
    return address


def get_contract_abi() -> list[dict[str, Any]]:
    """Return the ABI from GENESIS_ABI_PATH, or the embedded Genesis ABI."""
    load_genesis_env()
    path = (os.getenv("GENESIS_ABI_PATH") or "").strip()
    if not path:
        from genesis_client.gateway.abi import GENESIS_ABI

        return list(GENESIS_ABI)
    data = _read_json(Path(path))
    # Hardhat artifact or bare ABI list
    abi = data.get("abi") if isinstance(data, dict) else data
    if not isinstance(abi, list):
        raise ConfigurationError(f"{path} does not contain an ABI list")
    return abi


def get_poll_interval() -> float:
    load_genesis_env()
    raw = (os.getenv("GENESIS_POLL_INTERVAL_SECONDS") or "").strip()
    if not raw:
        return DEFAULT_POLL_INTERVAL_SEC
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"GENESIS_POLL_INTERVAL_SECONDS is not a number: {raw!r}") from e


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e
