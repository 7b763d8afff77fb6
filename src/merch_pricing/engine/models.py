"""
Data models for the pricing engine.

Uses dataclasses for structured, type-safe data representation.
Monetary amounts are Decimals; consumer price points are integer cents.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional

from .money import from_cents, format_eur


class InvalidProductError(ValueError):
    """A product description violates its invariants."""


COST_FIELDS = (
    'factory_unit_manual',
    'total_factory_carton',
    'shipping_inbound_per_unit',
    'epr_fee',
    'gs1_fee',
    'retail_packaging',
    'qc_pif',
    'operations',
    'marketing',
)

# Per-unit additive components (scaled by N when bundling)
ADDITIVE_COST_FIELDS = (
    'shipping_inbound_per_unit',
    'epr_fee',
    'gs1_fee',
    'retail_packaging',
    'qc_pif',
    'operations',
    'marketing',
)


@dataclass(frozen=True)
class TraceStep:
    """A single step in the pricing resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class ProductDescription:
    """Cost inputs for one sellable unit, as supplied by the catalog."""
    sku: str
    line: str

    factory_unit_manual: float = 0.0
    total_factory_carton: float = 0.0
    units_per_carton: int = 0

    shipping_inbound_per_unit: float = 0.0
    epr_fee: float = 0.0
    gs1_fee: float = 0.0
    retail_packaging: float = 0.0
    qc_pif: float = 0.0
    operations: float = 0.0
    marketing: float = 0.0

    net_content: Optional[float] = None
    net_content_unit: str = 'ml'  # "ml" or "g"

    gift_sku_cost: float = 0.0
    gift_attach_rate: Optional[float] = None
    gift_funding_pct: Optional[float] = None
    gift_shipping_increment: float = 0.0

    box_size: Optional[str] = None
    amazon_tier_key: Optional[str] = None
    manual_uvp_inc: Optional[float] = None

    def __post_init__(self):
        negative = [name for name in COST_FIELDS + ('gift_sku_cost', 'gift_shipping_increment')
                    if (getattr(self, name) or 0) < 0]
        if negative:
            raise InvalidProductError(
                f"SKU {self.sku}: cost components must be non-negative ({', '.join(negative)})"
            )
        if self.units_per_carton < 0:
            raise InvalidProductError(f"SKU {self.sku}: units_per_carton must be non-negative")
        if self.net_content_unit not in ('ml', 'g'):
            raise InvalidProductError(
                f"SKU {self.sku}: net_content_unit must be 'ml' or 'g', got {self.net_content_unit!r}"
            )


@dataclass(frozen=True)
class CostBreakdown:
    """Per-unit cost derivation for a product."""
    factory_unit: Decimal
    factory_unit_final: Decimal
    full_cost: Decimal
    floor_net: Decimal
    gift_cost_expected: Decimal
    box_cost_per_unit: Decimal


class PriceFloorFlag(str, Enum):
    OK = "OK"
    RAISE_NEEDED = "RAISE_NEEDED"


@dataclass(frozen=True)
class UvpQuote:
    """Consumer price derived from cost or a manual override."""
    uvp_net: Decimal
    uvp_inc: Decimal
    uvp_inc_99_cents: int
    price_vs_floor: PriceFloorFlag
    manual_override: bool = False


class GuardrailStatus(str, Enum):
    COMPUTED = "computed"
    INFEASIBLE = "infeasible"


@dataclass(frozen=True)
class Guardrail:
    """
    Minimum consumer price for one channel.

    An infeasible guardrail carries no price at all: costs and target
    margin consume the whole price, so it needs manual pricing review.
    """
    channel: str
    status: GuardrailStatus
    price_cents: Optional[int] = None
    referral_pct: Optional[Decimal] = None
    min_referral_fee_applied: bool = False
    iterations: int = 1
    converged: bool = True
    diverging: bool = False
    reason: Optional[str] = None

    @classmethod
    def infeasible(cls, channel: str, reason: str, iterations: int = 1) -> 'Guardrail':
        return cls(channel=channel, status=GuardrailStatus.INFEASIBLE,
                   iterations=iterations, converged=False, reason=reason)

    @property
    def feasible(self) -> bool:
        return self.status == GuardrailStatus.COMPUTED

    @property
    def price(self) -> Optional[Decimal]:
        return from_cents(self.price_cents) if self.price_cents is not None else None

    def covers(self, price_cents: int) -> bool:
        """True when a consumer price clears this guardrail."""
        return self.feasible and price_cents >= self.price_cents

    def label(self) -> str:
        if not self.feasible:
            return "INFEASIBLE"
        suffix = "" if self.converged else " (not converged)"
        return f"{format_eur(self.price_cents)}{suffix}"


class AutotuneAction(str, Enum):
    OK = "OK"
    RAISE_UVP = "RAISE_UVP"
    BUNDLE_RECOMMENDED = "BUNDLE_RECOMMENDED"


@dataclass(frozen=True)
class AutotuneOutcome:
    action: AutotuneAction
    uvp_inc_99_cents: int
    original_uvp_inc_99_cents: Optional[int] = None
    pct_increase: Optional[Decimal] = None
    max_guardrail_cents: Optional[int] = None
    needs_manual_review: bool = False

    @property
    def bundle_needed(self) -> bool:
        return self.action == AutotuneAction.BUNDLE_RECOMMENDED


@dataclass
class BundleProposal:
    """A multi-unit pack evaluated against the channel guardrails."""
    base_sku: str
    units: int
    proposed_price_cents: int
    guardrails: dict[str, Guardrail]
    coverage: dict[str, bool]
    all_channels_covered: bool

    full_cost_bundle: Decimal
    full_cost_unit: Decimal
    box_cost_bundle: Decimal
    box_cost_unit: Decimal
    margin_pct: Decimal

    single_unit_price_cents: int
    single_unit_guardrails: dict[str, Guardrail]

    total_net_content: Optional[Decimal] = None
    grundpreis: Optional[Decimal] = None
    grundpreis_unit: Optional[str] = None

    @property
    def covered_count(self) -> int:
        return sum(1 for ok in self.coverage.values() if ok)

    @property
    def proposed_price(self) -> Decimal:
        return from_cents(self.proposed_price_cents)


@dataclass
class PricingResult:
    """Complete result of pricing one product."""
    sku: str
    line: str

    factory_unit: Decimal
    factory_unit_final: Decimal
    full_cost: Decimal
    floor_net: Decimal

    uvp_net: Decimal
    uvp_inc: Decimal
    uvp_inc_99_cents: int
    price_vs_floor: PriceFloorFlag

    gift_cost_expected: Decimal
    box_cost_per_unit: Decimal
    guardrails: dict[str, Guardrail]
    autotune: AutotuneOutcome

    ad_pct: Decimal
    target_margin: Decimal

    grundpreis: Optional[Decimal] = None
    grundpreis_unit: Optional[str] = None
    bundle_proposals: list[BundleProposal] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the result-level trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        """Add a result-level warning."""
        if warning not in self.warnings:
            self.warnings.append(warning)

    @property
    def uvp_inc_99(self) -> Decimal:
        return from_cents(self.uvp_inc_99_cents)

    @property
    def needs_manual_review(self) -> bool:
        return any(not g.feasible for g in self.guardrails.values())

    @property
    def best_bundle(self) -> Optional[BundleProposal]:
        return self.bundle_proposals[0] if self.bundle_proposals else None

    def get_trace_text(self) -> str:
        """Get human-readable result trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_summary_dict(self) -> dict:
        """Flat row for reports and tables."""
        row = {
            "SKU": self.sku,
            "Line": self.line,
            "Full Cost": float(self.full_cost),
            "Floor Net": float(self.floor_net),
            "UVP Inc": float(self.uvp_inc_99),
            "Price vs Floor": self.price_vs_floor.value,
            "Autotune": self.autotune.action.value,
        }
        for channel, guardrail in self.guardrails.items():
            row[f"Guardrail {channel}"] = float(guardrail.price) if guardrail.feasible else None
        best = self.best_bundle
        row["Bundle Units"] = best.units if best else None
        row["Bundle Price"] = float(best.proposed_price) if best else None
        row["Bundle All Covered"] = best.all_channels_covered if best else None
        return row


@dataclass(frozen=True)
class OrderLine:
    """A product and quantity on a partner order."""
    product: ProductDescription
    qty: int

    def __post_init__(self):
        if self.qty <= 0:
            raise InvalidProductError(f"SKU {self.product.sku}: quantity must be positive")


@dataclass
class QuoteLine:
    """A single priced line in a quote."""
    sku: str
    qty: int
    unit_net: Decimal
    line_net: Decimal
    uvp_inc_99_cents: int
    role_discount_pct: Decimal
    qty_discount_pct: Decimal
    price_basis: str  # "discount", "cap", "floor" or "min_margin"
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace for this line item."""
        self.trace.append(TraceStep(step=step, description=description, value=value))


@dataclass
class QuoteResult:
    """Complete result of a partner quote."""
    role: str
    lines: list[QuoteLine]
    subtotal_net: Decimal
    order_discount_pct: Decimal
    order_discount_eur: Decimal
    subtotal_net_after_discount: Decimal
    vat_eur: Decimal
    shipping_eur: Decimal
    total_gross: Decimal
    loyalty_points: int
    commissions: dict[str, Decimal] = field(default_factory=dict)
    guardrails: dict[str, dict[str, Optional[int]]] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def add_warning(self, warning: str):
        if warning not in self.warnings:
            self.warnings.append(warning)

    @property
    def commission_eur(self) -> Decimal:
        return sum(self.commissions.values(), Decimal('0'))
