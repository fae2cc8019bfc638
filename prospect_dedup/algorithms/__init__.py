"""Prospect Dedup: Deduplication Algorithms."""

from .name_similarity import (
    compare_names,
    compute_name_similarity,
    levenshtein_similarity,
    name_tokens,
    normalize_name,
    token_set_similarity,
)
from .contact_matching import (
    PHONE_INVALID,
    compare_domains,
    compare_phones,
    domain_from_email,
    domain_from_url,
    normalize_domain,
    normalize_phone,
)
from .address_similarity import (
    compare_addresses,
    normalize_address,
)
from .composite_scorer import (
    EngineConfig,
    classify,
    compare_normalized,
    normalize_record,
    score,
    score_candidate_pairs,
)
from .blocking import BLOCKING_STRATEGIES, build_blocks
from .pairwise_scan import scan, scan_normalized
from .clustering import UnionFind, group

__all__ = [
    "compare_names",
    "compute_name_similarity",
    "levenshtein_similarity",
    "name_tokens",
    "normalize_name",
    "token_set_similarity",
    "PHONE_INVALID",
    "compare_domains",
    "compare_phones",
    "domain_from_email",
    "domain_from_url",
    "normalize_domain",
    "normalize_phone",
    "compare_addresses",
    "normalize_address",
    "EngineConfig",
    "classify",
    "compare_normalized",
    "normalize_record",
    "score",
    "score_candidate_pairs",
    "BLOCKING_STRATEGIES",
    "build_blocks",
    "scan",
    "scan_normalized",
    "UnionFind",
    "group",
]
