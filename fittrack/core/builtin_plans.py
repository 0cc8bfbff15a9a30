"""Built-in workout plans shipped with the app (read-only)."""

from fittrack.schemas.plan import Exercise, WorkoutPlan

WORKOUT_COLORS = {
    "Blue": "#64b5f6",
    "Green": "#aed581",
    "Orange": "#ffb74d",
    "Purple": "#ba68c8",
    "Red": "#ef5350",
    "Teal": "#4db6ac",
    "Pink": "#f06292",
    "Indigo": "#7986cb",
}


def _ex(id: str, name: str, sets: str, reps: str | None = None, duration: str | None = None) -> Exercise:
    return Exercise(id=id, name=name, sets=sets, reps=reps, duration=duration)


BUILTIN_PLANS: tuple[WorkoutPlan, ...] = (
    WorkoutPlan(
        id="upper1",
        name="UPPER",
        subtitle="Chest, Shoulder, Triceps",
        icon="figure.strengthtraining.traditional",
        color=WORKOUT_COLORS["Blue"],
        exercises=(
            _ex("u1-1", "Resistance Band Chest Press", "4", reps="12"),
            _ex("u1-2", "Incline Push-up / Pike Push-up", "3", reps="10"),
            _ex("u1-3", "Single Dumbbell Shoulder Press", "3", reps="12"),
            _ex("u1-4", "Resistance Band Lateral Raise", "3", reps="12–15"),
            _ex("u1-5", "Single Dumbbell Overhead Tricep Extension", "3", reps="12"),
            _ex("u1-6", "Resistance Band Tricep Pushdown", "3", reps="12"),
            _ex("u1-7", "Cooldown Cycling", "1", duration="5–15 minutes light"),
        ),
    ),
    WorkoutPlan(
        id="lower",
        name="LOWER",
        subtitle="Legs + Glutes + Calves",
        icon="figure.strengthtraining.functional",
        color=WORKOUT_COLORS["Green"],
        exercises=(
            _ex("l-1", "Goblet Squat (with dumbbell)", "4", reps="12"),
            _ex("l-2", "Resistance Band Deadlift / Romanian Deadlift", "3", reps="12"),
            _ex("l-3", "Front Lunges", "3", reps="12"),
            _ex("l-4", "Glute Bridge", "3", reps="15"),
            _ex("l-5", "Standing Calf Raise", "4", reps="15–20"),
            _ex("l-6", "Cycling", "1", duration="10–20 minutes"),
        ),
    ),
    WorkoutPlan(
        id="upper2",
        name="UPPER",
        subtitle="Back, Biceps, Forearm, Core",
        icon="figure.core.training",
        color=WORKOUT_COLORS["Orange"],
        exercises=(
            _ex("u2-1", "Resistance Band Row", "4", reps="12"),
            _ex("u2-2", "Resistance Band Face Pull", "3", reps="12"),
            _ex("u2-3", "Single Dumbbell Bicep Curl", "3", reps="12"),
            _ex("u2-4", "Hammer Curl (alternate dumbbell)", "3", reps="12"),
            _ex("u2-5", "Resistance Band Reverse Curl", "3", reps="12"),
            _ex("u2-6", "Renegade Row (with dumbbell)", "3", reps="10"),
            _ex("u2-7", "Penguin Crunch", "3", reps="20"),
            _ex("u2-8", "Plank", "3", duration="30–45 seconds"),
            _ex("u2-9", "Hollow Position", "3", duration="30 seconds"),
            _ex("u2-10", "Cooldown Cycling", "1", duration="5–15 minutes easy"),
        ),
    ),
)

BUILTIN_PLAN_IDS = frozenset(p.id for p in BUILTIN_PLANS)
