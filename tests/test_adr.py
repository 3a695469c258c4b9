from conftest import valid_report


def test_submit_report_returns_increasing_ids(client):
    first = client.post("/api/adr", json=valid_report())
    second = client.post("/api/adr", json=valid_report(patientInitials="SV"))

    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json()["success"] is True
    assert first.json()["message"] == "ADR report submitted successfully"
    assert second.json()["reportId"] > first.json()["reportId"]


def test_missing_reporter_email_is_rejected_and_not_stored(client):
    response = client.post("/api/adr", json=valid_report(reporterEmail=""))

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert any(error["field"] == "reporterEmail" for error in body["errors"])
    assert client.get("/api/adr").json() == []


def test_invalid_email_and_blank_initials_are_both_reported(client):
    response = client.post("/api/adr", json=valid_report(reporterEmail="not-an-email", patientInitials="   "))

    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert {"reporterEmail", "patientInitials"} <= fields


def test_medication_entries_need_a_name(client):
    response = client.post("/api/adr", json=valid_report(suspectedMedications=[{"name": "", "doseUsed": "5 mg"}]))

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "suspectedMedications.0.name"


def test_unknown_seriousness_tag_is_rejected(client):
    response = client.post("/api/adr", json=valid_report(seriousness=["mild"]))

    assert response.status_code == 400


def test_empty_outcome_is_accepted(client):
    response = client.post("/api/adr", json=valid_report(outcome=""))

    assert response.status_code == 201
    report = client.get(f"/api/adr/{response.json()['reportId']}").json()
    assert report["outcome"] is None


def test_list_and_get_reports_use_camel_case(client):
    report_id = client.post("/api/adr", json=valid_report()).json()["reportId"]

    reports = client.get("/api/adr").json()
    assert len(reports) == 1
    report = reports[0]
    assert report["id"] == report_id
    assert report["patientInitials"] == "RK"
    assert report["suspectedMedications"][0]["doseUsed"] == "500 mg"
    assert report["seriousness"] == ["hospitalization"]
    assert "createdAt" in report

    assert client.get(f"/api/adr/{report_id}").json() == report


def test_get_unknown_report_is_404(client):
    response = client.get("/api/adr/999")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Report not found"}


def test_statistics_count_serious_and_non_serious_per_drug(client):
    client.post("/api/adr", json=valid_report())
    client.post("/api/adr", json=valid_report(seriousness=[]))
    client.post("/api/adr", json=valid_report(
        suspectedMedicationName="Metformin",
        suspectedMedications=[{"name": "Metformin"}, {"name": "amoxicillin"}],
        seriousness=["death"],
    ))

    stats = {s["drugName"]: s for s in client.get("/api/adr/statistics").json()}

    assert list(stats) == ["Amoxicillin", "Metformin"]
    assert stats["Amoxicillin"]["totalReports"] == 3
    assert stats["Amoxicillin"]["seriousCount"] == 2
    assert stats["Amoxicillin"]["nonSeriousCount"] == 1
    assert stats["Metformin"]["totalReports"] == 1
    assert stats["Metformin"]["seriousCount"] == 1


def test_report_id_beyond_storage_range_is_400(client):
    response = client.get("/api/adr/99999999999999999999")

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "report_id"
