from datetime import date, datetime, timezone

from gymii.training.progress import LogRecord, compute_progress, week_start

NOW = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)  # a Wednesday

def log(when, reps, weight, name, muscle, sets=1):
    return LogRecord(completed_at=when, sets=sets, reps=reps, weight=weight,
                     exercise_name=name, muscle_group=muscle)

LOGS = [
    log(datetime(2024, 5, 14, 10, 0, tzinfo=timezone.utc), 10, 50, "Supino", "Peito, Triceps"),
    log(datetime(2024, 5, 14, 10, 5), 8, 60, "Supino", "Peito, Triceps"),  # naive means UTC
    log(datetime(2024, 5, 6, 9, 0, tzinfo=timezone.utc), 12, 20, "Rosca", "Biceps"),
    log(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc), 10, 10, "Agachamento", "", sets=2),
    log(None, 10, 10, "Ignored", "Peito"),
]

def test_week_start_is_monday():
    assert week_start(date(2024, 5, 15)) == date(2024, 5, 13)
    assert week_start(date(2024, 5, 13)) == date(2024, 5, 13)
    assert week_start(date(2024, 5, 19)) == date(2024, 5, 13)

def test_summary_covers_last_30_days():
    stats = compute_progress(LOGS, now=NOW)
    assert stats.has_logs
    assert stats.summary.total_volume == 1220
    assert stats.summary.total_sets == 3
    assert stats.summary.total_sessions == 2

def test_weekly_trend():
    stats = compute_progress(LOGS, now=NOW)
    assert [w.label for w in stats.weekly_trend] == ["08/04", "15/04", "22/04", "29/04", "06/05", "13/05"]
    assert [w.volume for w in stats.weekly_trend] == [0, 0, 0, 0, 240, 980]

def test_muscle_distribution_and_top_exercises():
    stats = compute_progress(LOGS, now=NOW)
    assert [(m.muscle, m.volume) for m in stats.muscle_distribution] == [
        ("Peito", 980), ("Tríceps", 980), ("Bíceps", 240), ("Geral", 200),
    ]
    assert round(stats.muscle_distribution[0].percentage, 2) == round(980 / 1420 * 100, 2)
    assert [(e.name, e.volume, e.sessions) for e in stats.top_exercises] == [
        ("Supino", 980, 1), ("Rosca", 240, 1), ("Agachamento", 200, 1),
    ]

def test_recent_sessions():
    stats = compute_progress(LOGS, now=NOW)
    first = stats.recent_sessions[0]
    assert first.date == date(2024, 5, 14)
    assert first.label == "14/05"
    assert first.volume == 980
    assert first.exercises == ["Supino"]
    assert [s.date for s in stats.recent_sessions] == [date(2024, 5, 14), date(2024, 5, 6), date(2024, 3, 1)]

def test_negative_volume_counts_as_zero():
    stats = compute_progress([log(NOW, 10, -5, "Odd", "Peito")], now=NOW)
    assert stats.summary.total_volume == 0
    assert stats.muscle_distribution[0].percentage == 0

def test_empty():
    stats = compute_progress([], now=NOW)
    assert not stats.has_logs
    assert stats.summary.total_sessions == 0
    assert len(stats.weekly_trend) == 6
    assert stats.top_exercises == []
    assert stats.recent_sessions == []
