"""Built-in workout templates seeded into ``workout_templates``."""

from __future__ import annotations

from typing import Any


def _plan(*rows: tuple) -> list[dict[str, Any]]:
    plan = []
    for index, row in enumerate(rows, start=1):
        entry: dict[str, Any] = {"set": index, "reps": row[0]}
        if len(row) > 1:
            entry["weight"] = row[1]
        plan.append(entry)
    return plan


def _exercise(name: str, effort: str, plan: list[dict[str, Any]]) -> dict[str, Any]:
    return {"name": name, "rest_seconds": 60, "effort": effort, "set_plan": plan}


TEMPLATES: list[dict[str, Any]] = [
    {
        "slug": "treino-2-aerobico-pernas",
        "name": "Treino 2 (Aerobico, Pernas)",
        "description": "Plano coringa focado em resistencia cardiovascular e fortalecimento de pernas.",
        "muscle_groups": ["Aerobico", "Pernas"],
        "intensity": "Moderado",
        "rest_seconds": 60,
        "exercises": [
            _exercise("Leg press", "Moderado", _plan((8, 170), (10, 150), (12, 140))),
            _exercise("Agachamento Smith", "Moderado", _plan((8, 26), (10, 23), (12, 20))),
            _exercise("Extensor", "Moderado", _plan((8, 50), (10, 45), (12, 40))),
            _exercise("Flexor", "Moderado", _plan((8, 45), (10, 40), (12, 35))),
            _exercise("Panturrilha Leg", "Moderado", _plan((10, 80), (12, 75), (14, 70))),
        ],
    },
    {
        "slug": "treino-3-abdominal-aerobico-ombro",
        "name": "Treino 3 (Abdominal, Aerobico e Ombro)",
        "description": "Combo rapido com aquecimento aerobico, foco em ombros e finalizacao abdominal.",
        "muscle_groups": ["Abdomen", "Aerobico", "Ombros"],
        "intensity": "Moderado",
        "rest_seconds": 60,
        "exercises": [
            _exercise("Eliptico", "Leve", _plan((15,))),
            _exercise(
                "Remada em pe cross",
                "Moderado",
                _plan((12, 45), (10, 50), (8, 55), (6, 60), (6, 60), (8, 55), (10, 50), (12, 45)),
            ),
            _exercise("Desenvolvimento Halteres", "Moderado", _plan((8, 20), (10, 18), (12, 16), (14, 14))),
            _exercise("Elevacao Lateral", "Moderado", _plan((8, 9), (10, 8), (12, 7), (14, 6))),
            _exercise("Crucifixo Inverso", "Moderado", _plan((8, 5), (10, 5), (12, 5))),
            _exercise("Obliquo Banco", "Moderado", _plan((20,), (20,), (20,))),
        ],
    },
    {
        "slug": "treino-4-aerobico-biceps-triceps",
        "name": "Treino 4 (Aerobico, Biceps e Triceps)",
        "description": "Sequencia com aquecimento aerobico e foco em biceps/triceps utilizando cargas progressivas.",
        "muscle_groups": ["Aerobico", "Biceps", "Triceps"],
        "intensity": "Moderado",
        "rest_seconds": 60,
        "exercises": [
            _exercise("Eliptico", "Moderado", _plan((15,))),
            _exercise("Rosca Scott", "Moderado", _plan((10, 10), (10, 12), (10, 12), (10, 12))),
            _exercise("Frances", "Moderado", _plan((10, 22), (10, 22), (10, 22), (10, 22))),
            _exercise("Polia", "Moderado", _plan((10, 35), (10, 40), (10, 45), (10, 40))),
            _exercise("Rosca Cross", "Pesado", _plan((8, 35), (8, 35), (8, 35), (8, 35))),
            _exercise("Triceps Banco", "Pesado", _plan((15,), (15,), (15,), (15,))),
        ],
    },
]
