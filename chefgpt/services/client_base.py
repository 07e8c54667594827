from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class ModelCall:
    capability: str
    prompt: str
    output_schema: dict[str, Any]
    fields: Mapping[str, Any] = field(default_factory=dict)


class ModelClient(Protocol):
    mode: str

    async def complete(self, call: ModelCall) -> str | None: ...
