"""
Pricing configuration model.

Pydantic models for the configuration document that drives the engine:
tax, product lines, partner roles, discount brackets, channel fee
structures, marketplace size tiers, box costs, loyalty and bundling.

All models are frozen; a PricingConfig is built once and shared read-only.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .exceptions import UnknownProductLineError, UnknownRoleError, UnknownChannelError


LINE_ALIASES = {
    'Pro': 'Professional',
    'Prem': 'Premium',
}


def normalize_line_name(line: Optional[str]) -> str:
    """Normalize a product line to TitleCase ("  PREMIUM " -> "Premium")."""
    normalized = (line or '').strip()
    if not normalized:
        return ''
    title_case = normalized[0].upper() + normalized[1:].lower()
    return LINE_ALIASES.get(title_case, title_case)


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra='forbid')


class LineConfig(_Frozen):
    """Per product line targets."""
    gm_uvp: float = Field(ge=0, lt=1)       # Target gross margin for UVP
    ad_pct: float = Field(ge=0, lt=1)       # Advertising cost share
    floor_mult: float = Field(gt=0)         # Floor price multiplier on full cost


class RoleConfig(_Frozen):
    """Partner role discount policy."""
    discount: float = Field(ge=0, lt=1)     # Base discount off UVP net
    cap: float = Field(ge=0, lt=1)          # Maximum discount off UVP net
    min_eur: float = Field(default=0.0, ge=0)  # Minimum absolute margin over full cost
    commission_pct: float = Field(default=0.0, ge=0, lt=1)
    qty_discount_exempt: bool = False
    loyalty_eligible: bool = True


class ReferralTier(_Frozen):
    max_inc: Optional[float] = None         # None = open-ended
    pct: float = Field(ge=0, lt=1)


class ChannelConfig(_Frozen):
    """Fee structure for one sales channel."""
    referral_pct: float = Field(default=0.0, ge=0, lt=1)
    platform_pct: float = Field(default=0.0, ge=0, lt=1)
    label_fee: float = Field(default=0.0, ge=0)
    min_referral_fee: Optional[float] = Field(default=None, ge=0)
    tiered_referral: list[ReferralTier] = Field(default_factory=list)
    apply_payment_fee: bool = False
    apply_return_costs: bool = False
    marketplace_fulfillment: bool = False
    ad_pct_override: dict[str, float] = Field(default_factory=dict)

    @field_validator('tiered_referral')
    @classmethod
    def check_tier_order(cls, tiers: list[ReferralTier]) -> list[ReferralTier]:
        """Thresholds must ascend and only the last tier may be open-ended."""
        previous = None
        for i, tier in enumerate(tiers):
            if tier.max_inc is None:
                if i != len(tiers) - 1:
                    raise ValueError("only the last referral tier may be open-ended")
                continue
            if previous is not None and tier.max_inc <= previous:
                raise ValueError("referral tier thresholds must be strictly ascending")
            previous = tier.max_inc
        return tiers

    @field_validator('ad_pct_override')
    @classmethod
    def normalize_override_keys(cls, overrides: dict[str, float]) -> dict[str, float]:
        return {normalize_line_name(line): pct for line, pct in overrides.items()}

    @property
    def is_tiered(self) -> bool:
        return len(self.tiered_referral) > 0


class SizeTierFees(_Frozen):
    """Marketplace fulfillment fees for one size tier."""
    pick_pack: float = Field(default=0.0, ge=0)
    weight: float = Field(default=0.0, ge=0)
    storage: float = Field(default=0.0, ge=0)
    label_prep: float = Field(default=0.0, ge=0)
    returns_pct: float = Field(default=0.0, ge=0, lt=1)  # Added to the channel variable rate

    @property
    def total(self) -> float:
        return self.pick_pack + self.weight + self.storage + self.label_prep


class QuantityBracket(_Frozen):
    min: int = Field(ge=0)
    max: int = Field(ge=0)
    pct: float = Field(ge=0, lt=1)

    @model_validator(mode='after')
    def check_bounds(self) -> 'QuantityBracket':
        if self.min > self.max:
            raise ValueError(f"quantity bracket min {self.min} exceeds max {self.max}")
        return self


class OrderBracket(_Frozen):
    min_subtotal_net: float = Field(ge=0)
    pct: float = Field(ge=0, lt=1)


class LoyaltyConfig(_Frozen):
    points_per_euro: float = Field(default=0.0, ge=0)
    point_value_eur: float = Field(default=0.0, ge=0)
    expected_redemption: float = Field(default=0.0, ge=0, le=1)

    @property
    def cost_pct(self) -> float:
        """Loyalty cost as a share of price."""
        return self.points_per_euro * self.point_value_eur * self.expected_redemption


class GiftDefaults(_Frozen):
    """Gift-with-purchase defaults used when a product leaves them unset."""
    funding_pct: float = Field(default=0.0, ge=0, le=1)
    attach_rate: float = Field(default=0.0, ge=0, le=1)


class AvgUnitsPerOrder(_Frozen):
    B2C: float = Field(default=1.0, gt=0)
    B2B: float = Field(default=1.0, gt=0)


class BundlingConfig(_Frozen):
    autotune_raise_cap: float = Field(default=0.25, ge=0)
    min_units: int = Field(default=2, ge=1)
    max_units: int = Field(default=6, ge=1)
    prefer_even_units: bool = True
    price_ladder_inc: list[float] = Field(default_factory=lambda: [
        14.99, 16.99, 18.99, 19.99, 21.99, 23.99, 24.99, 26.99, 27.99, 29.99, 32.99,
    ])
    channels_considered: list[str] = Field(default_factory=lambda: [
        'Amazon_FBA', 'Amazon_FBM', 'OwnStore',
    ])

    @field_validator('price_ladder_inc')
    @classmethod
    def check_ladder(cls, ladder: list[float]) -> list[float]:
        if any(b <= a for a, b in zip(ladder, ladder[1:])):
            raise ValueError("price ladder must be strictly ascending")
        return ladder

    @model_validator(mode='after')
    def check_unit_range(self) -> 'BundlingConfig':
        if self.min_units > self.max_units:
            raise ValueError(f"bundling min_units {self.min_units} exceeds max_units {self.max_units}")
        return self


class PricingConfig(_Frozen):
    """Complete, validated pricing configuration."""
    version: str = '2.2'
    effective_date: Optional[str] = None
    description: str = ''

    vat: float = Field(ge=0, lt=1)
    fx_buffer_pct: float = Field(default=0.0, ge=0)
    target_post_channel_margin: float = Field(ge=0, lt=1)
    returns_pct: float = Field(default=0.0, ge=0, lt=1)
    payment_fee_pct: float = Field(default=0.0, ge=0, lt=1)
    consumer_round_to: float = Field(default=0.99, ge=0, lt=1)

    loyalty: LoyaltyConfig = Field(default_factory=LoyaltyConfig)
    product_lines: dict[str, LineConfig]
    partner_roles: dict[str, RoleConfig] = Field(default_factory=dict)
    quantity_discounts: list[QuantityBracket] = Field(default_factory=list)
    order_discounts: list[OrderBracket] = Field(default_factory=list)
    channels: dict[str, ChannelConfig]
    amazon_size_tiers: dict[str, SizeTierFees] = Field(default_factory=dict)
    box_costs: dict[str, float] = Field(default_factory=dict)
    avg_units_per_order: AvgUnitsPerOrder = Field(default_factory=AvgUnitsPerOrder)
    gwp_defaults: GiftDefaults = Field(default_factory=GiftDefaults)
    bundling: BundlingConfig = Field(default_factory=BundlingConfig)

    @field_validator('product_lines')
    @classmethod
    def normalize_line_keys(cls, lines: dict[str, LineConfig]) -> dict[str, LineConfig]:
        normalized = {}
        for name, line in lines.items():
            key = normalize_line_name(name)
            if key in normalized:
                raise ValueError(f"duplicate product line after normalization: {name}")
            normalized[key] = line
        return normalized

    @model_validator(mode='after')
    def check_bundle_channels(self) -> 'PricingConfig':
        unknown = [c for c in self.bundling.channels_considered if c not in self.channels]
        if unknown:
            raise ValueError(f"bundling references unknown channels: {', '.join(unknown)}")
        return self

    def line(self, name: str) -> tuple[str, LineConfig]:
        """Resolve a product line; returns (normalized name, config)."""
        key = normalize_line_name(name)
        if key not in self.product_lines:
            raise UnknownProductLineError(name, key)
        return key, self.product_lines[key]

    def role(self, name: str) -> RoleConfig:
        role = self.partner_roles.get(str(name).strip())
        if role is None:
            raise UnknownRoleError(name)
        return role

    def channel(self, name: str) -> ChannelConfig:
        channel = self.channels.get(name)
        if channel is None:
            raise UnknownChannelError(name)
        return channel

    def size_tier(self, tier_key: Optional[str]) -> Optional[SizeTierFees]:
        return self.amazon_size_tiers.get(tier_key) if tier_key else None

    def size_tier_fees(self, tier_key: Optional[str]) -> float:
        """Fee bundle for a marketplace size tier; 0 when unset or unknown."""
        tier = self.size_tier(tier_key)
        return tier.total if tier else 0.0
