"""Chain client protocol — blockchain RPC abstraction."""
from typing import Any, Protocol, Sequence


class ChainClient(Protocol):
    """Abstract interface for EVM JSON-RPC interactions."""

    async def get_block_number(self) -> int: ...

    async def get_logs(
        self, address: str, from_block: int, to_block: int
    ) -> list[dict[str, Any]]: ...

    async def read_contract(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function_name: str,
        args: Sequence[Any] = (),
    ) -> Any: ...
