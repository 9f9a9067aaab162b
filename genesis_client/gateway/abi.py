"""
Embedded Genesis contract ABI (the subset the client calls).

Struct components are listed in declaration order; the raw record schemas in
genesis_client.ledger.models rely on the same order for positional decoding.
Override with GENESIS_ABI_PATH to use a compiled Hardhat artifact.
"""

from __future__ import annotations

from typing import Any


def _param(name: str, type_: str, **extra: Any) -> dict[str, Any]:
    return {"name": name, "type": type_, "internalType": extra.pop("internal", type_), **extra}


_PROJECT_COMPONENTS = [
    _param("id", "uint256"),
    _param("owner", "address"),
    _param("title", "string"),
    _param("description", "string"),
    _param("imageURL", "string"),
    _param("cost", "uint256"),
    _param("raised", "uint256"),
    _param("timestamp", "uint256"),
    _param("expiresAt", "uint256"),
    _param("backers", "uint256"),
    _param("status", "uint8", internal="enum Genesis.statusEnum"),
]

_BACKER_COMPONENTS = [
    _param("owner", "address"),
    _param("contribution", "uint256"),
    _param("timestamp", "uint256"),
    _param("refunded", "bool"),
]


def _function(
    name: str,
    inputs: list[dict[str, Any]],
    outputs: list[dict[str, Any]],
    mutability: str = "nonpayable",
) -> dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": inputs,
        "outputs": outputs,
        "stateMutability": mutability,
    }


GENESIS_ABI: tuple[dict[str, Any], ...] = (
    _function(
        "createProject",
        [
            _param("title", "string"),
            _param("description", "string"),
            _param("imageURL", "string"),
            _param("cost", "uint256"),
            _param("expiresAt", "uint256"),
        ],
        [_param("", "bool")],
    ),
    _function(
        "updateProject",
        [
            _param("id", "uint256"),
            _param("title", "string"),
            _param("description", "string"),
            _param("imageURL", "string"),
            _param("expiresAt", "uint256"),
        ],
        [_param("", "bool")],
    ),
    _function("deleteProject", [_param("id", "uint256")], [_param("", "bool")]),
    _function("backProject", [_param("id", "uint256")], [_param("", "bool")], "payable"),
    _function("payOutProject", [_param("id", "uint256")], [_param("", "bool")]),
    _function(
        "getProject",
        [_param("id", "uint256")],
        [_param("", "tuple", internal="struct Genesis.projectStruct", components=_PROJECT_COMPONENTS)],
        "view",
    ),
    _function(
        "getProjects",
        [],
        [_param("", "tuple[]", internal="struct Genesis.projectStruct[]", components=_PROJECT_COMPONENTS)],
        "view",
    ),
    _function(
        "getBackers",
        [_param("id", "uint256")],
        [_param("", "tuple[]", internal="struct Genesis.backerStruct[]", components=_BACKER_COMPONENTS)],
        "view",
    ),
    _function(
        "stats",
        [],
        [
            _param("totalProjects", "uint256"),
            _param("totalBacking", "uint256"),
            _param("totalDonations", "uint256"),
        ],
        "view",
    ),
)

WRITE_METHODS = ("createProject", "updateProject", "deleteProject", "backProject", "payOutProject")
READ_METHODS = ("getProject", "getProjects", "getBackers", "stats")
