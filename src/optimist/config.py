"""
Wrapper configuration

Fun fact: the default ceiling of 100 pending entries is generous - a healthy
UI rarely has more than a handful of requests in flight at once.
"""

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

DEFAULT_MAX_HISTORY = 100


class OptimistConfig(BaseModel):
    """
    Tunables accepted when a wrapper is constructed

    max_history only controls when the UnboundedHistory warning fires;
    the engine never evicts or blocks because of it.
    """

    max_history: int = Field(
        default=DEFAULT_MAX_HISTORY,
        ge=1,
        description="History length above which a possible-leak warning is logged",
    )

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls) -> "OptimistConfig":
        """Build a config from OPTIMIST_MAX_HISTORY (falls back to defaults)"""
        raw = os.getenv("OPTIMIST_MAX_HISTORY")
        if raw is None:
            return cls()
        return cls(max_history=int(raw))

    @classmethod
    def coerce(
        cls, config: "OptimistConfig | Mapping[str, Any] | None", **overrides: Any
    ) -> "OptimistConfig":
        """
        Normalise whatever the caller passed into an OptimistConfig

        Args:
            config: Existing config, a plain mapping of fields, or None for defaults
            **overrides: Field values that win over anything in config
        """
        if config is None:
            data: dict[str, Any] = {}
        elif isinstance(config, OptimistConfig):
            data = config.model_dump()
        else:
            data = dict(config)
        data.update(overrides)
        return cls.model_validate(data)
