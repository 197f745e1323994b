from fastapi.testclient import TestClient
from gymii.main import app
import uuid

client = TestClient(app)
PWD = "StrongPassw0rd!"

def auth_headers():
    email = f"{uuid.uuid4().hex[:10]}@ex.com"
    client.post("/auth/register", json={"email": email, "name": "W", "password": PWD})
    token = client.post("/auth/login", json={"email": email, "password": PWD}).json()["access_token"]
    return {"Authorization": f"Bearer {token}"}

def create_workout(h, name="Treino A", muscle_group="Peito"):
    r = client.post("/workouts", headers=h, json={"name": name, "muscle_group": muscle_group})
    assert r.status_code == 201, r.text
    return r.json()

def add_exercise(h, workout_id, **overrides):
    body = {"name": "Supino", "sets": 3, "reps": 10, "weight": 40, "rest_seconds": 60}
    body.update(overrides)
    return client.post(f"/workouts/{workout_id}/exercises", headers=h, json=body)

def test_create_and_list_workouts_newest_first():
    h = auth_headers()
    a = create_workout(h, "A")
    b = create_workout(h, "B")
    add_exercise(h, a["id"])
    r = client.get("/workouts", headers=h)
    assert r.status_code == 200
    body = r.json()
    assert [w["id"] for w in body] == [b["id"], a["id"]]
    assert [w["exercises_count"] for w in body] == [0, 1]

def test_workout_validation():
    h = auth_headers()
    r = client.post("/workouts", headers=h, json={"name": "  ", "muscle_group": "Peito"})
    assert r.status_code == 422
    r = client.post("/workouts", headers=h, json={"name": "A"})
    assert r.status_code == 422

def test_update_and_delete_workout():
    h = auth_headers()
    w = create_workout(h)
    r = client.put(f"/workouts/{w['id']}", headers=h, json={"name": "Novo", "muscle_group": "Costas"})
    assert r.status_code == 200
    assert r.json()["name"] == "Novo"
    add_exercise(h, w["id"])
    r = client.delete(f"/workouts/{w['id']}", headers=h)
    assert r.status_code == 204
    assert client.get(f"/workouts/{w['id']}", headers=h).status_code == 404

def test_other_users_workouts_are_invisible():
    owner, other = auth_headers(), auth_headers()
    w = create_workout(owner)
    ex = add_exercise(owner, w["id"]).json()
    assert client.get(f"/workouts/{w['id']}", headers=other).status_code == 404
    assert client.put(f"/workouts/{w['id']}", headers=other, json={"name": "X", "muscle_group": "Y"}).status_code == 404
    assert client.delete(f"/workouts/{w['id']}", headers=other).status_code == 404
    assert add_exercise(other, w["id"]).status_code == 404
    assert client.delete(f"/exercises/{ex['id']}", headers=other).status_code == 404
    assert client.get("/workouts", headers=other).json() == []

def test_exercises_are_appended_in_order():
    h = auth_headers()
    w = create_workout(h)
    first = add_exercise(h, w["id"], name="  Supino  ").json()
    second = add_exercise(h, w["id"], name="Crucifixo", weight=0).json()
    assert first["name"] == "Supino"
    assert (first["order_index"], second["order_index"]) == (0, 1)
    assert first["set_plan"] is None
    detail = client.get(f"/workouts/{w['id']}", headers=h).json()
    assert [e["name"] for e in detail["exercises"]] == ["Supino", "Crucifixo"]
    listed = client.get(f"/workouts/{w['id']}/exercises", headers=h).json()
    assert [e["id"] for e in listed] == [first["id"], second["id"]]

def test_exercise_validation():
    h = auth_headers()
    w = create_workout(h)
    assert add_exercise(h, w["id"], sets=0).status_code == 422
    assert add_exercise(h, w["id"], reps=0).status_code == 422
    assert add_exercise(h, w["id"], weight=-1).status_code == 422
    assert add_exercise(h, w["id"], rest_seconds=-5).status_code == 422
    assert add_exercise(h, w["id"], name="   ").status_code == 422

def test_update_and_delete_exercise():
    h = auth_headers()
    w = create_workout(h)
    ex = add_exercise(h, w["id"]).json()
    body = {"name": "Supino inclinado", "sets": 4, "reps": 8, "weight": 42.5, "rest_seconds": 90}
    r = client.put(f"/exercises/{ex['id']}", headers=h, json=body)
    assert r.status_code == 200
    assert r.json()["weight"] == 42.5
    assert r.json()["order_index"] == 0
    assert client.delete(f"/exercises/{ex['id']}", headers=h).status_code == 204
    assert client.put(f"/exercises/{ex['id']}", headers=h, json=body).status_code == 404
