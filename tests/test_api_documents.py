import uuid
from datetime import timedelta

from app.models.document import Document, DocumentType, Relationship
from app.services.documents import record_locks
from app.services.expiry import today


def _create_document(db_session, user, **overrides):
    defaults = dict(
        user_id=user.id,
        document_type=DocumentType.passport,
        document_name="UAE Passport",
        person_name="Test User",
        relationship=Relationship.self,
        expiry_date=today() + timedelta(days=200),
    )
    defaults.update(overrides)
    doc = Document(**defaults)
    db_session.add(doc)
    db_session.commit()
    db_session.refresh(doc)
    return doc


def _payload(**overrides):
    data = {
        "document_type": "Visa",
        "document_name": "Residence Visa",
        "person_name": "Sara",
        "relationship": "Spouse",
        "expiry_date": (today() + timedelta(days=5)).isoformat(),
    }
    data.update(overrides)
    return data


class TestAuthRequired:
    def test_list_requires_auth(self, client):
        resp = client.get("/documents")
        assert resp.status_code == 401
        assert resp.json()["code"] == "http_401"

    def test_bad_token(self, client):
        resp = client.get("/documents", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401


class TestDocumentReads:
    def test_list_documents(self, client, auth_headers, db_session, user):
        _create_document(db_session, user, document_name="Later", expiry_date=today() + timedelta(days=300))
        _create_document(db_session, user, document_name="Sooner", expiry_date=today() + timedelta(days=3))
        resp = client.get("/documents", headers=auth_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["count"] == 2
        assert data["total"] == 2
        assert [d["document_name"] for d in data["items"]] == ["Sooner", "Later"]
        assert data["items"][0]["expiry"]["status"] == "warning"
        assert data["items"][0]["expiry"]["message"] == "Expires in 3 days"

    def test_list_with_search_filter_and_sort(self, client, auth_headers, db_session, user):
        _create_document(db_session, user, document_name="Gym", document_type=DocumentType.membership, expiry_date=today() - timedelta(days=2))
        _create_document(db_session, user, document_name="Passport B", person_name="Zaid")
        _create_document(db_session, user, document_name="Passport A", person_name="Amal")
        resp = client.get(
            "/documents",
            params={"q": "PASSPORT", "status": "safe", "sort_by": "person_name"},
            headers=auth_headers,
        )
        data = resp.json()
        assert [d["person_name"] for d in data["items"]] == ["Amal", "Zaid"]
        assert data["count"] == 2
        assert data["total"] == 3

    def test_list_expired_filter(self, client, auth_headers, db_session, user):
        _create_document(db_session, user, document_name="Old", expiry_date=today() - timedelta(days=1))
        _create_document(db_session, user, document_name="New")
        resp = client.get("/documents", params={"status": "expired"}, headers=auth_headers)
        assert [d["document_name"] for d in resp.json()["items"]] == ["Old"]
        assert resp.json()["items"][0]["expiry"]["message"] == "Expired 1 days ago"

    def test_invalid_filter(self, client, auth_headers):
        resp = client.get("/documents", params={"status": "bogus"}, headers=auth_headers)
        assert resp.status_code == 400

    def test_list_only_own_documents(self, client, auth_headers, db_session, user, other_user):
        _create_document(db_session, user, document_name="Mine")
        _create_document(db_session, other_user, document_name="Theirs")
        resp = client.get("/documents", headers=auth_headers)
        assert [d["document_name"] for d in resp.json()["items"]] == ["Mine"]

    def test_get_document(self, client, auth_headers, db_session, user):
        doc = _create_document(db_session, user)
        resp = client.get(f"/documents/{doc.id}", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["id"] == str(doc.id)
        assert resp.json()["expiry"]["color"] == "green"

    def test_get_other_users_document(self, client, auth_headers, db_session, other_user):
        doc = _create_document(db_session, other_user)
        resp = client.get(f"/documents/{doc.id}", headers=auth_headers)
        assert resp.status_code == 404

    def test_options(self, client):
        resp = client.get("/documents/options")
        data = resp.json()
        assert "Emirates ID" in data["document_types"]
        assert data["relationships"][0] == "Self"
        assert data["status_filters"] == ["all", "expired", "expiring", "safe"]
        assert data["sort_keys"] == ["expiry_date", "document_name", "person_name"]

    def test_versioned_prefix(self, client, auth_headers):
        resp = client.get("/api/v1/documents", headers=auth_headers)
        assert resp.status_code == 200


class TestDocumentWrites:
    def test_create_document(self, client, auth_headers, user):
        resp = client.post("/documents", json=_payload(), headers=auth_headers)
        assert resp.status_code == 201
        data = resp.json()
        assert data["document"]["document_name"] == "Residence Visa"
        assert data["document"]["user_id"] == str(user.id)
        assert data["document"]["expiry"]["message"] == "Expires in 5 days"
        assert [d["id"] for d in data["items"]] == [data["document"]["id"]]
        assert data["stats"] == {"total": 1, "expired": 0, "expiring": 1, "safe": 0}

    def test_create_missing_required_field(self, client, auth_headers):
        payload = _payload()
        del payload["expiry_date"]
        resp = client.post("/documents", json=payload, headers=auth_headers)
        assert resp.status_code == 422
        assert resp.json()["code"] == "validation_error"

    def test_create_empty_name(self, client, auth_headers):
        resp = client.post("/documents", json=_payload(document_name=""), headers=auth_headers)
        assert resp.status_code == 422

    def test_create_blank_person_name(self, client, auth_headers):
        resp = client.post("/documents", json=_payload(person_name="   "), headers=auth_headers)
        assert resp.status_code == 422
        assert resp.json()["code"] == "validation_error"

    def test_create_invalid_type(self, client, auth_headers):
        resp = client.post("/documents", json=_payload(document_type="Diploma"), headers=auth_headers)
        assert resp.status_code == 400

    def test_update_document(self, client, auth_headers, db_session, user):
        doc = _create_document(db_session, user)
        resp = client.patch(
            f"/documents/{doc.id}",
            json={"notes": "Renewal booked"},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["document"]["notes"] == "Renewal booked"
        assert data["document"]["document_name"] == "UAE Passport"
        assert data["items"][0]["notes"] == "Renewal booked"

    def test_update_other_users_document(self, client, auth_headers, db_session, other_user):
        doc = _create_document(db_session, other_user)
        resp = client.patch(f"/documents/{doc.id}", json={"notes": "x"}, headers=auth_headers)
        assert resp.status_code == 404

    def test_update_while_busy(self, client, auth_headers, db_session, user):
        doc = _create_document(db_session, user)
        with record_locks.hold(doc.id):
            resp = client.patch(f"/documents/{doc.id}", json={"notes": "x"}, headers=auth_headers)
        assert resp.status_code == 409
        assert resp.json()["code"] == "operation_in_progress"

    def test_delete_requires_confirmation(self, client, auth_headers, db_session, user):
        doc = _create_document(db_session, user)
        resp = client.delete(f"/documents/{doc.id}", headers=auth_headers)
        assert resp.status_code == 428
        body = resp.json()
        assert body["code"] == "confirmation_required"
        assert body["message"] == "Are you sure you want to delete this document?"
        listed = client.get("/documents", headers=auth_headers).json()
        assert listed["total"] == 1

    def test_delete_document(self, client, auth_headers, db_session, user):
        keep = _create_document(db_session, user, document_name="Keep")
        doc = _create_document(db_session, user, document_name="Drop")
        before = client.get("/dashboard", headers=auth_headers).json()["stats"]["total"]
        resp = client.delete(
            f"/documents/{doc.id}", params={"confirm": "true"}, headers=auth_headers
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["document"] is None
        assert [d["id"] for d in data["items"]] == [str(keep.id)]
        assert data["stats"]["total"] == before - 1
        listed = client.get("/documents", headers=auth_headers).json()
        assert str(doc.id) not in [d["id"] for d in listed["items"]]

    def test_delete_other_users_document(self, client, auth_headers, db_session, other_user):
        doc = _create_document(db_session, other_user)
        resp = client.delete(
            f"/documents/{doc.id}", params={"confirm": "true"}, headers=auth_headers
        )
        assert resp.status_code == 404

    def test_delete_unknown(self, client, auth_headers):
        resp = client.delete(
            f"/documents/{uuid.uuid4()}", params={"confirm": "true"}, headers=auth_headers
        )
        assert resp.status_code == 404
