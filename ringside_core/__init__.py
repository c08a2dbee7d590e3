from .assignments import (
    copy_sparring_from_forms,
    move_competitor_to_pool,
    reinstate_competitor,
    withdraw_competitor,
)
from .categories import (
    CategoryDefinition,
    apply_categories,
    assign_categories,
    auto_generate_definitions,
    calculate_pools_needed,
    matches_definition,
)
from .checkpoint import (
    CheckpointDiff,
    CompetitorChange,
    affected_ring_names,
    create_checkpoint,
    delete_checkpoint,
    diff_checkpoint,
    diff_states,
    find_checkpoint,
    rename_checkpoint,
    restore_checkpoint,
)
from .config import DEFAULT_CONFIG, EngineConfig
from .ordering import (
    SubRingStatus,
    interleave_by_school,
    order_pool_members,
    order_ring,
    rank_between,
    seed_by_height,
    set_rank_order,
    sub_ring_status,
)
from .pools import distribute_all_categories, distribute_category
from .rings import (
    EffectiveAssignment,
    build_pool_name,
    competitors_in_ring,
    compute_competition_rings,
    format_pool,
    parse_pool_number,
    pool_id,
    resolve_assignment,
    resolve_division,
    ring_key_for,
)
from .types import (
    SAME_AS_OTHER,
    Category,
    Checkpoint,
    CompetitionRing,
    Competitor,
    EventEntry,
    ExplicitDivision,
    PoolMapping,
    RingKey,
    SameAsOther,
    TournamentState,
)
from .validation import CompetitorRecord, competitor_to_record, parse_competitors

__all__ = [
    "Category",
    "CategoryDefinition",
    "Checkpoint",
    "CheckpointDiff",
    "CompetitionRing",
    "Competitor",
    "CompetitorChange",
    "CompetitorRecord",
    "DEFAULT_CONFIG",
    "EffectiveAssignment",
    "EngineConfig",
    "EventEntry",
    "ExplicitDivision",
    "PoolMapping",
    "RingKey",
    "SAME_AS_OTHER",
    "SameAsOther",
    "SubRingStatus",
    "TournamentState",
    "affected_ring_names",
    "apply_categories",
    "assign_categories",
    "auto_generate_definitions",
    "build_pool_name",
    "calculate_pools_needed",
    "competitor_to_record",
    "competitors_in_ring",
    "compute_competition_rings",
    "copy_sparring_from_forms",
    "create_checkpoint",
    "delete_checkpoint",
    "diff_checkpoint",
    "diff_states",
    "distribute_all_categories",
    "distribute_category",
    "find_checkpoint",
    "format_pool",
    "interleave_by_school",
    "matches_definition",
    "move_competitor_to_pool",
    "order_pool_members",
    "order_ring",
    "parse_competitors",
    "parse_pool_number",
    "pool_id",
    "rank_between",
    "reinstate_competitor",
    "rename_checkpoint",
    "resolve_assignment",
    "resolve_division",
    "restore_checkpoint",
    "ring_key_for",
    "seed_by_height",
    "set_rank_order",
    "sub_ring_status",
    "withdraw_competitor",
]
