from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ClientCredentials:
    client_id: str
    # repr=False keeps the secret out of any log line that formats this object
    client_secret: str = field(repr=False)
