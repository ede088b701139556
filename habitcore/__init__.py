"""habitcore — habit streak, progress and onboarding-trait engines.

Public API re-exports for convenient imports:
    from habitcore import current_streak, weekly_progress, derive_traits, ...
"""

# Errors
from habitcore.errors import InvalidArgumentError

# Models
from habitcore.models import (
    Habit,
    CompletionRecord,
    CleanupReport,
    WeeklyProgress,
    HabitStats,
    StreakEntry,
    AnalyticsSummary,
    PeriodMetrics,
    OnboardingAnswers,
    TraitProfile,
)

# Schedules
from habitcore.schedule import (
    normalize_schedule,
    habit_days,
    is_scheduled_on,
    schedule_label,
    weekday_index,
)

# Completions
from habitcore.completions import (
    CompletionStore,
    load_completions,
    parse_completion_key,
    format_completion_key,
    classify_key,
    reconcile_completion_keys,
)

# Streaks
from habitcore.streaks import (
    DEFAULT_LOOKBACK_DAYS,
    MAX_STREAK_WEEKS,
    current_streak,
    longest_streak,
    habit_stats,
    rank_streaks,
)

# Weekly progress
from habitcore.progress import (
    week_start,
    week_dates,
    weekly_progress,
    day_completion_rate,
    week_completion_rate,
)

# Analytics
from habitcore.analytics import (
    MAX_WINDOW_DAYS,
    summarize,
    period_metrics,
    habit_label,
    habit_row,
    build_dashboard,
)

# Traits
from habitcore.traits import derive_traits

# Workspace
from habitcore.workspace import (
    Settings,
    workspace_root,
    load_settings,
    today,
    load_habits,
    load_workspace_completions,
    habits_path,
    completions_path,
    profile_path,
    settings_path,
)
