"""
Prometheus metrics for the launchpad.

We expose counters and histograms covering:
- offerings: created / cancelled / finalized, and a gauge by status
- deposits: count and amount distribution
- claims: single and batch merkle claims by result, batch sizes
- distribution generation: count by regime and duration

Everything lives on a dedicated registry so embedding apps can choose to
merge it or expose it directly.
"""
from __future__ import annotations

from prometheus_client import (CONTENT_TYPE_LATEST, CollectorRegistry, Counter,
                               Gauge, Histogram, generate_latest)

REGISTRY = CollectorRegistry()

# ────────────────────────────────────────────────────────────────────────────────
# Label conventions
#   event:  "created" | "cancelled" | "finalized" | "root_set"
#   result: "paid" | "invalid_proof" | "already_claimed" | "nothing_to_claim"
#   regime: "under_subscribed" | "over_subscribed"
#   kind:   "dev" | "liquidity"
# ────────────────────────────────────────────────────────────────────────────────

OFFERING_EVENTS = Counter(
    "launchpad_offering_events_total",
    "Offering lifecycle transitions by event.",
    labelnames=("event",),
    registry=REGISTRY,
)

OFFERINGS_OPEN = Gauge(
    "launchpad_offerings_open",
    "Offerings created and not yet finalized or cancelled.",
    registry=REGISTRY,
)

DEPOSITS = Counter(
    "launchpad_deposits_total",
    "Accepted deposits.",
    registry=REGISTRY,
)

DEPOSIT_AMOUNT = Histogram(
    "launchpad_deposit_amount",
    "Deposit amounts in quote-token base units.",
    buckets=(1e6, 1e7, 1e8, 1e9, 1e10, 1e11, 1e12),
    registry=REGISTRY,
)

CLAIMS = Counter(
    "launchpad_merkle_claims_total",
    "Merkle claims processed by result.",
    labelnames=("result",),
    registry=REGISTRY,
)

OWNER_CLAIMS = Counter(
    "launchpad_owner_claims_total",
    "Dev and liquidity token claims by kind.",
    labelnames=("kind",),
    registry=REGISTRY,
)

BATCH_SIZE = Histogram(
    "launchpad_batch_claim_size",
    "Number of entries per batch claim.",
    buckets=(1, 5, 10, 25, 50, 100, 250, 500),
    registry=REGISTRY,
)

DISTRIBUTIONS_GENERATED = Counter(
    "launchpad_distributions_generated_total",
    "Distributions generated by allocation regime.",
    labelnames=("regime",),
    registry=REGISTRY,
)

DISTRIBUTION_SECONDS = Histogram(
    "launchpad_distribution_generate_seconds",
    "Time spent allocating, hashing and proving a distribution.",
    buckets=(0.001, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0),
    registry=REGISTRY,
)


def render_latest() -> tuple[bytes, str]:
    """Return `(payload, content_type)` for a scrape endpoint."""
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST


__all__ = [
    "REGISTRY",
    "OFFERING_EVENTS",
    "OFFERINGS_OPEN",
    "DEPOSITS",
    "DEPOSIT_AMOUNT",
    "CLAIMS",
    "OWNER_CLAIMS",
    "BATCH_SIZE",
    "DISTRIBUTIONS_GENERATED",
    "DISTRIBUTION_SECONDS",
    "render_latest",
]
