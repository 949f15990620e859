"""
HTTP-level tests against an in-memory SQLite database.
"""

import unicodedata

import pytest

PLAN_SUBJECTS = [
    {"code": "1000004-M", "name": "Cálculo Diferencial", "credits": 4, "category": "fund-required"},
    {"code": "3010651", "name": "Estadística I", "credits": 3, "category": "fund-required"},
    {"code": "3010435", "name": "Fundamentos de Programación", "credits": 3, "category": "disc-required"},
    {"code": "3007862", "name": "Visión Artificial", "credits": 3, "category": "disc-elective"},
]

OLD_SUBJECTS = [
    {"code": "3006914", "name": "Estadística I (Antigua)", "credits": 3, "category": "fund-required"},
]

TRANSCRIPT_TEXT = """
Cálculo Diferencial (1000004-M) 4 FUND. OBLIGATORIA 2023-1S 4.2 APROBADA
Estadística I (3006914) 3 FUND. OBLIGATORIA 2023-2S 3.5 APROBADA
Fundamentos de Programación (3010435) 3 DISCIPLINAR OBLIGATORIA 2024-1S 2.4 REPROBADA
"""


@pytest.fixture
def seeded(client):
    assert client.post("/api/careers", json={"code": "ISIS", "name": "Ingeniería de Sistemas"}).status_code == 201
    old = client.post(
        "/api/study-plans",
        json={"career_code": "ISIS", "version": "2013-1", "is_active": False, "subjects": OLD_SUBJECTS},
    )
    assert old.status_code == 201
    plan = client.post(
        "/api/study-plans",
        json={
            "career_code": "ISIS",
            "version": "2023-1",
            "subjects": PLAN_SUBJECTS,
            "requirements": {
                "fund_required": 7,
                "fund_elective": 0,
                "disc_required": 3,
                "disc_elective": 3,
                "free_elective": 0,
                "total": 20,
            },
        },
    )
    assert plan.status_code == 201
    plan_id = plan.json()["id"]
    eq = client.post(
        "/api/equivalences",
        json={
            "equivalences": [
                {
                    "source_code": "3006914",
                    "target_code": "3010651",
                    "kind": "total",
                    "notes": "Equivalencia automática: 3006914 → 3010651",
                    "study_plan_id": plan_id,
                }
            ]
        },
    )
    assert eq.status_code == 201
    return plan_id


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_duplicate_career_conflicts(client):
    client.post("/api/careers", json={"code": "ISIS", "name": "Ingeniería de Sistemas"})
    response = client.post("/api/careers", json={"code": "ISIS", "name": "Otra"})
    assert response.status_code == 409


def test_unknown_career_is_404(client):
    assert client.get("/api/careers/NOPE").status_code == 404
    assert client.get("/api/careers/NOPE/study-plan").status_code == 404


def test_study_plan_lookup(client, seeded):
    by_id = client.get(f"/api/study-plans/{seeded}").json()
    active = client.get("/api/careers/ISIS/study-plan").json()

    assert by_id == active
    assert by_id["version"] == "2023-1"
    assert by_id["subject_count"] == 4
    assert by_id["requirements"]["total"] == 20


def test_requirements_default_to_subject_sums(client):
    client.post("/api/careers", json={"code": "IADM", "name": "Ingeniería Administrativa"})
    response = client.post(
        "/api/study-plans",
        json={"career_code": "IADM", "version": "2023-1", "subjects": PLAN_SUBJECTS},
    )

    requirements = response.json()["requirements"]
    assert requirements["fund_required"] == 7
    assert requirements["disc_elective"] == 3
    assert requirements["total"] == 13


def test_study_plan_rejects_unbudgeted_category(client):
    client.post("/api/careers", json={"code": "ISIS", "name": "Ingeniería de Sistemas"})
    response = client.post(
        "/api/study-plans",
        json={
            "career_code": "ISIS",
            "version": "2023-1",
            "subjects": [{"code": "TG", "name": "Trabajo de Grado", "credits": 6, "category": "capstone"}],
        },
    )
    assert response.status_code == 422


def test_equivalence_with_unknown_subject(client, seeded):
    response = client.post(
        "/api/equivalences",
        json={"equivalences": [{"source_code": "NOPE", "target_code": "3010651"}]},
    )
    assert response.status_code == 404


def test_compare_structured(client, seeded):
    response = client.post(
        "/api/compare",
        json={
            "career_code": "ISIS",
            "subjects": [
                {"code": "1000004-M", "name": "Cálculo Diferencial", "credits": 4, "status": "APROBADA"},
                {"code": "3006914", "name": "Estadística I", "credits": 3, "status": "approved"},
                {"code": "3010435", "name": "Fundamentos", "credits": 3, "status": "failed"},
            ],
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["study_plan_id"] == seeded
    assert sorted(c["code"] for c in body["satisfied"]) == ["1000004-M", "3010651"]
    assert sorted(c["code"] for c in body["pending"]) == ["3007862", "3010435"]
    via = next(c for c in body["satisfied"] if c["code"] == "3010651")["equivalence"]
    assert via["matched_code"] == "3006914"
    assert via["direction"] == "reverse"
    summary = body["credits_summary"]
    assert summary["categories"]["fund-required"] == {"required": 7, "completed": 7, "missing": 0}
    assert summary["total"] == {"required": 20, "completed": 7, "missing": 13}
    assert body["completion_percentage"] == 35.0


def test_compare_accepts_export_labels(client, seeded):
    response = client.post(
        "/api/compare",
        json={
            "career_code": "ISIS",
            "subjects": [
                {"code": "3007862", "credits": 3, "type": "dis.optativa", "semester": "2024-1S", "status": "aprobada"},
            ],
        },
    )

    assert response.status_code == 200
    assert [c["code"] for c in response.json()["satisfied"]] == ["3007862"]


def test_parse_preview_with_decomposed_accents(client):
    text = unicodedata.normalize("NFD", "Matemáticas Básicas (1000001) 4 NIVELACIÓN 2022-1S 4.0")

    body = client.post("/api/transcripts/parse", json={"text": text}).json()

    assert body["entries"][0]["category"] == "leveling"
    assert body["credits_by_category"]["leveling"]["approved"] == 4


def test_compare_text(client, seeded):
    response = client.post("/api/compare/text", json={"study_plan_id": seeded, "text": TRANSCRIPT_TEXT})

    assert response.status_code == 200
    body = response.json()
    assert body["satisfied_count"] == 2
    assert body["pending_count"] == 2


def test_compare_requires_a_plan_reference(client):
    response = client.post("/api/compare", json={"subjects": []})
    assert response.status_code == 422


def test_compare_unknown_plan(client):
    response = client.post("/api/compare", json={"study_plan_id": 999, "subjects": []})
    assert response.status_code == 404


def test_compare_text_without_courses(client, seeded):
    response = client.post("/api/compare/text", json={"career_code": "ISIS", "text": "   \n  "})
    assert response.status_code == 422


def test_parse_preview(client):
    response = client.post("/api/transcripts/parse", json={"text": TRANSCRIPT_TEXT})

    body = response.json()
    assert body["count"] == 3
    assert body["approved_count"] == 2
    assert body["entries"][2]["status"] == "failed"
    assert body["weighted_average"] == pytest.approx(3.45)
    assert body["approved_average"] == pytest.approx(3.9)
    assert body["credits_by_category"]["fund-required"] == {"approved": 7, "in_progress": 0, "taken": 7}
    assert body["credits_by_category"]["disc-required"] == {"approved": 0, "in_progress": 0, "taken": 3}


def test_parse_strict_mode(client):
    text = TRANSCRIPT_TEXT + "Sin créditos (XYZ) APROBADA\n"

    assert client.post("/api/transcripts/parse", json={"text": text}).json()["count"] == 3
    strict = client.post("/api/transcripts/parse", json={"text": text, "tolerant": False})
    assert strict.status_code == 422


def test_upload_text_file(client):
    files = {"file": ("historia.txt", TRANSCRIPT_TEXT.encode("utf-8"), "text/plain")}
    response = client.post("/api/transcripts/upload", files=files)

    assert response.status_code == 200
    assert response.json()["count"] == 3


def test_upload_csv_file(client):
    content = "code,name,credits,category,status\n1000004-M,Cálculo,4,fund-required,APROBADA\n"
    files = {"file": ("historia.csv", content.encode("utf-8"), "text/csv")}

    response = client.post("/api/transcripts/upload", files=files)

    assert response.json()["entries"][0]["category"] == "fund-required"
