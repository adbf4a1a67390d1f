"""Built-in session catalogue and runner factories.

Static content for the three timed screens: rest-timer presets, guided
meditation templates, and the default scoliosis PT routine.  The
factories return a ``SessionRunner`` configured for each domain so the
screens never wire engines up by hand.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from PyQt6.QtCore import QObject

from .engine import TICK_INTERVAL_MS, validate_duration
from .runner import SessionKind, SessionRunner


# ── rest timer ────────────────────────────────────────────────────────────

REST_PRESETS: tuple[int, ...] = (30, 60, 90, 120, 180)  # seconds
DEFAULT_REST_SECONDS = 90


# ── meditation ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MeditationTemplate:
    key: str
    name: str
    minutes: int
    description: str
    steps: tuple[str, ...] = ()


MEDITATION_TEMPLATES: tuple[MeditationTemplate, ...] = (
    MeditationTemplate(
        "guided_breathing", "Guided Breathing", 5,
        "Deep breathing exercises to calm your mind and reduce stress.",
        (
            "Sit comfortably and close your eyes",
            "Breathe in slowly through your nose for four counts",
            "Hold gently for four counts",
            "Exhale through your mouth for six counts",
            "Let your breath return to its natural rhythm",
        ),
    ),
    MeditationTemplate(
        "body_scan", "Body Scan", 10,
        "Progressive relaxation from head to toe.",
        (
            "Bring attention to the top of your head",
            "Relax your face, jaw and neck",
            "Let your shoulders and arms grow heavy",
            "Soften your chest, belly and lower back",
            "Release your hips, legs and feet",
            "Notice your whole body at rest",
        ),
    ),
    MeditationTemplate(
        "mindfulness", "Mindfulness", 15,
        "Present-moment awareness. Observe thoughts without judgment.",
        (
            "Settle in and notice your breathing",
            "Notice sounds around you without labeling them",
            "Watch thoughts arrive and pass like clouds",
            "Gently return to the breath when you drift",
        ),
    ),
    MeditationTemplate(
        "sleep", "Sleep Meditation", 20,
        "Calming visualization to prepare for restful sleep.",
        (
            "Lie down and let the day go",
            "Slow your breathing",
            "Picture a calm, safe place",
            "Let each exhale carry you deeper",
        ),
    ),
    MeditationTemplate(
        "morning_focus", "Morning Focus", 10,
        "Set intentions and mental clarity for the day ahead.",
        (
            "Take three energizing breaths",
            "Pick one intention for today",
            "Picture yourself following through",
        ),
    ),
    MeditationTemplate(
        "stress_relief", "Stress Relief", 8,
        "Quick relaxation techniques to manage anxiety and overwhelm.",
        (
            "Name what you are feeling",
            "Breathe out longer than you breathe in",
            "Unclench your hands and shoulders",
            "Pick one small next step",
        ),
    ),
)


def meditation_template(key: str) -> MeditationTemplate:
    for template in MEDITATION_TEMPLATES:
        if template.key == key:
            return template
    raise KeyError(f"Unknown meditation template: {key!r}")


# ── scoliosis PT ──────────────────────────────────────────────────────────

DEFAULT_PT_SECONDS = 30


@dataclass(frozen=True)
class PtExercise:
    id: str
    name: str
    sets: int = 1
    duration_seconds: int = DEFAULT_PT_SECONDS
    repetitions: int | None = None
    target_area: str = ""
    description: str = ""
    instructions: tuple[str, ...] = field(default_factory=tuple)


DEFAULT_PT_EXERCISES: tuple[PtExercise, ...] = (
    PtExercise(
        "1", "Cat-Cow Stretch", sets=1, duration_seconds=60,
        target_area="Spine Mobility",
        description="Alternate between arching and rounding your back on hands and knees.",
        instructions=(
            "Start on hands and knees with wrists under shoulders",
            "Inhale: Drop belly, lift head and tailbone (cow)",
            "Exhale: Round spine, tuck chin and tailbone (cat)",
            "Move slowly and smoothly between positions",
        ),
    ),
    PtExercise(
        "2", "Child's Pose", sets=1, duration_seconds=45,
        target_area="Back & Hips",
        description="A gentle resting stretch that elongates the spine.",
        instructions=(
            "Kneel on the floor, big toes together",
            "Sit back on your heels",
            "Fold forward, reaching arms out in front",
            "Rest forehead on the floor and breathe deeply",
        ),
    ),
    PtExercise(
        "3", "Pelvic Tilt", sets=3, duration_seconds=30, repetitions=10,
        target_area="Core & Pelvis",
        description="Engages deep core muscles to stabilize the pelvis and lower back.",
        instructions=(
            "Lie on your back with knees bent, feet flat",
            "Flatten your lower back against the floor",
            "Tighten your abs and hold for 3-5 seconds",
            "Release and repeat",
        ),
    ),
    PtExercise(
        "4", "Side Stretch", sets=2, duration_seconds=30,
        target_area="Lateral Spine",
        description="Stretches the concave side of the spinal curve.",
        instructions=(
            "Stand tall with feet hip-width apart",
            "Raise one arm overhead",
            "Lean gently to the opposite side",
            "Hold the stretch, breathing deeply",
        ),
    ),
    PtExercise(
        "5", "Core Breathing", sets=1, duration_seconds=90,
        target_area="Core & Breathing",
        description="Diaphragmatic breathing for core stability and spinal alignment.",
        instructions=(
            "Lie on your back with knees bent",
            "Place one hand on chest, one on belly",
            "Breathe in through nose - belly should rise",
            "Exhale slowly through mouth - belly falls",
            "Keep chest relatively still throughout",
        ),
    ),
)


def pt_exercise(exercise_id: str) -> PtExercise:
    for exercise in DEFAULT_PT_EXERCISES:
        if exercise.id == exercise_id:
            return exercise
    raise KeyError(f"Unknown PT exercise: {exercise_id!r}")


# ══════════════════════════════════════════════════════════════════════════
#  FACTORIES
# ══════════════════════════════════════════════════════════════════════════


def rest_session(
    seconds: int = DEFAULT_REST_SECONDS,
    *,
    sets: int = 1,
    sink=None,
    parent: QObject | None = None,
    interval_ms: int = TICK_INTERVAL_MS,
) -> SessionRunner:
    """Rest-between-sets countdown.  ``select_preset`` swaps the length."""
    return SessionRunner(
        SessionKind.REST, seconds, parent,
        total_sets=sets, sink=sink, interval_ms=interval_ms,
    )


def meditation_session(
    template: MeditationTemplate,
    minutes: int | None = None,
    *,
    sink=None,
    parent: QObject | None = None,
    interval_ms: int = TICK_INTERVAL_MS,
) -> SessionRunner:
    """Single guided countdown; ``minutes`` overrides the template length."""
    length = validate_duration(template.minutes if minutes is None else minutes)
    return SessionRunner(
        SessionKind.MEDITATION, length * 60, parent,
        steps=template.steps, sink=sink, interval_ms=interval_ms,
    )


def pt_exercise_session(
    exercise: PtExercise,
    *,
    sink=None,
    parent: QObject | None = None,
    interval_ms: int = TICK_INTERVAL_MS,
    default_seconds: int = DEFAULT_PT_SECONDS,
) -> SessionRunner:
    """One PT exercise: ``sets`` repetitions of ``duration_seconds`` each.

    Exercises without a set length use *default_seconds*.
    """
    return SessionRunner(
        SessionKind.PT_EXERCISE, exercise.duration_seconds or default_seconds, parent,
        total_sets=max(1, exercise.sets),
        steps=exercise.instructions, sink=sink, interval_ms=interval_ms,
    )
