from __future__ import annotations
from enum import Enum
from typing import Literal, Optional, Union
from pydantic import BaseModel, Field


class Dialect(str, Enum):
    PFSENSE = "pfsense"
    OPNSENSE = "opnsense"


# ----------------------------
# Extracted firewall identity
# ----------------------------

class PfSenseConfig(BaseModel):
    dialect: Literal[Dialect.PFSENSE] = Dialect.PFSENSE
    hostname: str = Field(..., min_length=1)
    domain: Optional[str] = None

    @property
    def canonical_hostname(self) -> str:
        if self.domain:
            return f"{self.hostname}.{self.domain}"
        return self.hostname


class OPNsenseConfig(BaseModel):
    dialect: Literal[Dialect.OPNSENSE] = Dialect.OPNSENSE
    hostname: str = Field(..., min_length=1)

    @property
    def canonical_hostname(self) -> str:
        return self.hostname


FirewallConfig = Union[PfSenseConfig, OPNsenseConfig]
