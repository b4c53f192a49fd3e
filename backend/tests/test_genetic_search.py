import random

import pytest

from slotforge.schemas.generator import GenerationSettings
from slotforge.schemas.timetable import (
    WORKING_DAYS,
    ClassType,
    Classroom,
    Day,
    Faculty,
    RoomType,
    ScheduledClass,
    Subject,
    TimeSlot,
    WeeklySchedule,
)
from slotforge.services.candidate_generator import CandidateGenerator
from slotforge.services.conflict_detector import count_clashes
from slotforge.services.genetic_search import FitnessContext, GeneticSearch, Individual


def session(day=Day.monday, start="09:00", end="10:00", subject="s1", faculty="f1", room="r1", fixed=False):
    return ScheduledClass(
        day=day,
        time_slot=TimeSlot(start_time=start, end_time=end),
        subject_id=subject,
        faculty_id=faculty,
        classroom_id=room,
        class_type=ClassType.theory,
        is_fixed=fixed,
    )


def schedule_of(*sessions):
    schedule = WeeklySchedule.empty()
    for item in sessions:
        schedule.add(item)
    return schedule


def build_search(subjects, faculty, classrooms, slots, *, settings=None, seed=1):
    rng = random.Random(seed)
    settings = settings or GenerationSettings(population_size=12, generations=8)
    generator = CandidateGenerator(
        subjects=subjects,
        faculty=faculty,
        classrooms=classrooms,
        days=WORKING_DAYS,
        slots=slots,
        rng=rng,
    )
    context = FitnessContext.build(
        subjects=subjects,
        faculty=faculty,
        classrooms=classrooms,
        slots=slots,
        max_classes_per_day=6,
    )
    return GeneticSearch(generator=generator, context=context, settings=settings, rng=rng)


@pytest.fixture()
def campus():
    subjects = [
        Subject(id="algo", classes_per_week=4),
        Subject(id="os", classes_per_week=3),
        Subject(id="db", classes_per_week=3),
    ]
    faculty = [
        Faculty(id="f1", subject_ids=["algo", "os"]),
        Faculty(id="f2", subject_ids=["os", "db"]),
    ]
    classrooms = [
        Classroom(id="r1", type=RoomType.lecture_hall, capacity=60),
        Classroom(id="r2", type=RoomType.lecture_hall, capacity=80),
    ]
    return subjects, faculty, classrooms


def test_fitness_follows_weighted_formula(reference_slots):
    faculty = [Faculty(id="f1", subject_ids=["s1"]), Faculty(id="f2", subject_ids=["s1"])]
    classrooms = [Classroom(id="r1", type=RoomType.lecture_hall, capacity=60)]
    search = build_search([Subject(id="s1", classes_per_week=2)], faculty, classrooms, reference_slots)
    # Two sessions for f1 in the same slot and room: one faculty and one classroom clash.
    schedule = schedule_of(session(), session(subject="s1"))

    fitness = search.evaluate(schedule)

    # balance: loads [2, 0] -> mean 1, variance 1 -> 0; utilization 2 / (1 * 7 * 6)
    expected = 100 - 10 * 2 + 20 * 0 + 15 * (2 / 42)
    assert fitness == pytest.approx(expected)


def test_fitness_penalizes_daily_overload_and_floors_at_zero(reference_slots):
    faculty = [Faculty(id="f1", subject_ids=["s1"])]
    classrooms = [Classroom(id="r1", type=RoomType.lecture_hall, capacity=60)]
    search = build_search([Subject(id="s1", classes_per_week=9)], faculty, classrooms, reference_slots)
    crowded = schedule_of(*[session(subject="s1", room="r1", faculty="f1") for _ in range(8)])
    relaxed = schedule_of(
        *[session(start=slot.start_time, end=slot.end_time) for slot in reference_slots]
    )

    assert search.evaluate(crowded) == 0.0
    # Seven sessions on one day against a limit of six costs five points.
    assert search.evaluate(relaxed) == pytest.approx(100 + 20 + 15 * (7 / 42) - 5)


def test_crossover_offspring_are_clash_free_in_both_directions(campus, reference_slots):
    subjects, faculty, classrooms = campus
    search = build_search(subjects, faculty, classrooms, reference_slots, seed=21)
    parent_a = search.generator.generate(WeeklySchedule.empty())
    parent_b = search.generator.generate(WeeklySchedule.empty())
    pooled = set(parent_a.sessions()) | set(parent_b.sessions())

    for _ in range(25):
        for child in (search.crossover(parent_a, parent_b), search.crossover(parent_b, parent_a)):
            assert count_clashes(child) == 0
            assert set(child.sessions()) <= pooled


def test_crossover_never_exceeds_required_sessions(campus, reference_slots):
    subjects, faculty, classrooms = campus
    search = build_search(subjects, faculty, classrooms, reference_slots, seed=4)
    search.settings = GenerationSettings(population_size=12, generations=8, crossover_inclusion_rate=1.0)
    parent_a = search.generator.generate(WeeklySchedule.empty())
    parent_b = search.generator.generate(WeeklySchedule.empty())

    child = search.crossover(parent_a, parent_b)

    for subject in subjects:
        assert len(child.sessions_for_subject(subject.id)) <= subject.classes_per_week


def test_crossover_always_inherits_fixed_sessions(reference_slots):
    subjects = [Subject(id="pinned", classes_per_week=1), Subject(id="s1", classes_per_week=2)]
    search = build_search(subjects, [Faculty(id="f1", subject_ids=["s1"])], [], reference_slots)
    search.settings = GenerationSettings(population_size=12, generations=8, crossover_inclusion_rate=0.0)
    pinned = session(subject="pinned", faculty=None, room="r9", fixed=True)
    parent_a = schedule_of(pinned, session(start="10:00", end="11:00"))
    parent_b = schedule_of(pinned, session(day=Day.tuesday))

    child = search.crossover(parent_a, parent_b)

    assert list(child.sessions()) == [pinned]


def test_mutation_moves_one_session_and_keeps_resources(reference_slots):
    search = build_search([Subject(id="s1", classes_per_week=1)], [], [], reference_slots, seed=9)
    original = session(start="09:00", end="10:00", faculty="f7", room="r7")
    schedule = schedule_of(original)

    assert search.mutate(schedule) is True

    [moved] = list(schedule.sessions())
    assert moved.day == Day.monday
    assert moved.faculty_id == "f7"
    assert moved.classroom_id == "r7"
    assert moved.time_slot in reference_slots
    assert original.time_slot == TimeSlot(start_time="09:00", end_time="10:00")


def test_mutation_leaves_fixed_sessions_alone(reference_slots):
    search = build_search([Subject(id="s1", classes_per_week=1)], [], [], reference_slots)
    pinned = session(fixed=True)
    schedule = schedule_of(pinned)

    assert search.mutate(schedule) is False
    assert list(schedule.sessions()) == [pinned]


def test_tournament_selection_prefers_fitter_individuals(reference_slots):
    search = build_search([], [], [], reference_slots, seed=17)
    weak = Individual(schedule=WeeklySchedule.empty(), fitness=10.0)
    strong = Individual(schedule=WeeklySchedule.empty(), fitness=90.0)

    picks = [search.select([weak, strong]) for _ in range(200)]

    # With k=3 the weaker one only wins when it is drawn three times (1 in 8).
    assert all(item is weak or item is strong for item in picks)
    assert sum(item is strong for item in picks) > 150


def test_best_fitness_never_decreases_across_generations(campus, reference_slots):
    subjects, faculty, classrooms = campus
    settings = GenerationSettings(population_size=16, generations=15, mutation_rate=0.5)
    search = build_search(subjects, faculty, classrooms, reference_slots, settings=settings, seed=13)

    outcome = search.run(WeeklySchedule.empty())

    history = outcome.fitness_history
    assert len(history) == settings.generations + 1
    assert outcome.generations_run == settings.generations
    assert all(later >= earlier for earlier, later in zip(history, history[1:]))
    assert outcome.fitness == history[-1]


def test_time_budget_stops_search_early(campus, reference_slots):
    subjects, faculty, classrooms = campus
    settings = GenerationSettings(population_size=10, generations=500, time_budget_seconds=1e-9)
    search = build_search(subjects, faculty, classrooms, reference_slots, settings=settings)

    outcome = search.run(WeeklySchedule.empty())

    assert outcome.generations_run == 0
    assert outcome.fitness_history == [outcome.fitness]
