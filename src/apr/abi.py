"""Contract ABIs and the ``eth_call`` payload codec built on ``eth_abi``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector

LP_TOKEN_ABI: List[Dict[str, Any]] = [
    {
        "inputs": [],
        "name": "getReserves",
        "outputs": [
            {"internalType": "uint112", "name": "_reserve0", "type": "uint112"},
            {"internalType": "uint112", "name": "_reserve1", "type": "uint112"},
            {"internalType": "uint32", "name": "_blockTimestampLast", "type": "uint32"},
        ],
        "stateMutability": "view",
        "type": "function",
    }
]

YYJOE_STAKING_ABI: List[Dict[str, Any]] = [
    {
        "inputs": [],
        "name": "internalBalance",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    }
]

BOOSTED_MASTERCHEF_ABI: List[Dict[str, Any]] = [
    {
        "inputs": [],
        "name": "joePerSec",
        "outputs": [{"internalType": "uint256", "name": "amount", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "totalAllocPoint",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "poolLength",
        "outputs": [{"internalType": "uint256", "name": "pools", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "name": "poolInfo",
        "outputs": [
            {"internalType": "contract IERC20", "name": "lpToken", "type": "address"},
            {"internalType": "uint96", "name": "allocPoint", "type": "uint96"},
            {"internalType": "uint256", "name": "accJoePerShare", "type": "uint256"},
            {"internalType": "uint256", "name": "accJoePerFactorPerShare", "type": "uint256"},
            {"internalType": "uint64", "name": "lastRewardTimestamp", "type": "uint64"},
            {"internalType": "contract IRewarder", "name": "rewarder", "type": "address"},
            {"internalType": "uint32", "name": "veJoeShareBp", "type": "uint32"},
            {"internalType": "uint256", "name": "totalFactor", "type": "uint256"},
            {"internalType": "uint256", "name": "totalLpSupply", "type": "uint256"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": "uint256", "name": "", "type": "uint256"},
            {"internalType": "address", "name": "", "type": "address"},
        ],
        "name": "userInfo",
        "outputs": [
            {"internalType": "uint256", "name": "amount", "type": "uint256"},
            {"internalType": "uint256", "name": "rewardDebt", "type": "uint256"},
            {"internalType": "uint256", "name": "factor", "type": "uint256"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
]


@dataclass(frozen=True)
class AbiFunction:
    name: str
    input_types: Tuple[str, ...]
    output_types: Tuple[str, ...]
    output_names: Tuple[str, ...]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.input_types)})"

    def encode_call(self, args: Sequence[Any] = ()) -> str:
        """Return the hex ``data`` field for an ``eth_call`` to this function."""
        selector = function_signature_to_4byte_selector(self.signature)
        return "0x" + (selector + encode(list(self.input_types), list(args))).hex()

    def decode_result(self, data: str) -> Any:
        """Decode hex return data.

        A single output is returned as a bare value; several outputs come back
        as a dict keyed by output name (or position when the name is blank).
        """
        raw = bytes.fromhex(data[2:] if data.startswith("0x") else data)
        values = decode(list(self.output_types), raw)
        if len(values) == 1:
            return values[0]
        return {
            name or str(index): value
            for index, (name, value) in enumerate(zip(self.output_names, values))
        }


def get_function(abi: Sequence[Dict[str, Any]], name: str) -> AbiFunction:
    for entry in abi:
        if entry.get("type") == "function" and entry.get("name") == name:
            return AbiFunction(
                name=name,
                input_types=tuple(i["type"] for i in entry.get("inputs", [])),
                output_types=tuple(o["type"] for o in entry.get("outputs", [])),
                output_names=tuple(o.get("name", "") for o in entry.get("outputs", [])),
            )
    raise KeyError(f"function {name} not found in ABI")
