"""Kernel configuration."""

from pydantic import BaseModel, Field


class CrisisConfig(BaseModel):
    """Configuration for the Crisis Generator."""

    max_new: int = Field(ge=0, default=3)
    max_new_under_shock: int = Field(ge=0, default=2)
    chance_cap: float = Field(ge=0, le=1, default=0.40)
    subtype_repeat_window: int = Field(ge=0, default=2)
    shock_high_override: float = Field(ge=0, le=1, default=0.35)
    fading_high_override: float = Field(ge=0, le=1, default=0.15)


class TextureConfig(BaseModel):
    """Configuration for the ambient World Event Texture Generator."""

    min_events: int = Field(ge=1, default=1)
    max_events: int = Field(ge=1, default=6)
    retry_limit: int = Field(ge=0, default=8)
    health_repeat_damping: float = Field(ge=0, le=1, default=0.35)
    heavy_recovery_health_damping: float = Field(ge=0, le=1, default=0.6)
    ledger_lookback_cycles: int = Field(ge=0, default=5)


class HookConfig(BaseModel):
    """Thresholds for domain accumulation hooks."""

    cluster_threshold: int = Field(ge=1, default=4)
    signal_threshold: int = Field(ge=1, default=2)


class KernelConfig(BaseModel):
    crisis: CrisisConfig = CrisisConfig()
    texture: TextureConfig = TextureConfig()
    hooks: HookConfig = HookConfig()
