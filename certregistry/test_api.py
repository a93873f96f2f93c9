# test_api.py
# unittest suite exercising the HTTP API through Flask's test client.

import io
import unittest

from certregistry.services import hash_service
from certregistry.testing import RegistryTestCase, ADMIN, INSTITUTION_A, INSTITUTION_B, RECIPIENT


class ApiTestCase(RegistryTestCase):

    def setUp(self):
        super().setUp()
        self.client = self.app.test_client()

    def login(self, address, password="secret"):
        self.client.post("/auth/signup", json={"address": address, "password": password, "pin": "test-pin"})
        response = self.client.post("/auth/login", json={"address": address, "password": password})
        self.assertEqual(response.status_code, 200, response.get_json())
        return {"Authorization": f"Bearer {response.get_json()['access_token']}"}

    def certificate_payload(self, content_ref="Qm123", **overrides):
        payload = {
            "recipient": RECIPIENT,
            "recipient_name": "Priya Sharma",
            "course_name": "Computer Science",
            "grade": "A",
            "content_ref": content_ref,
            "completion_date": "2024-06-01",
            "cert_type": "Degree",
        }
        payload.update(overrides)
        return payload


class TestAuthApi(ApiTestCase):

    def test_signup_requires_pin(self):
        response = self.client.post("/auth/signup", json={"address": INSTITUTION_A, "password": "x", "pin": "wrong"})
        self.assertEqual(response.status_code, 403)

    def test_duplicate_signup(self):
        self.login(INSTITUTION_A)
        response = self.client.post("/auth/signup", json={"address": INSTITUTION_A, "password": "x", "pin": "test-pin"})
        self.assertEqual(response.status_code, 409)

    def test_bad_password(self):
        self.login(INSTITUTION_A)
        response = self.client.post("/auth/login", json={"address": INSTITUTION_A, "password": "wrong"})
        self.assertEqual(response.status_code, 401)

    def test_non_text_credentials_are_invalid_input(self):
        cases = [
            ("/auth/signup", {"address": INSTITUTION_A, "password": ["x"], "pin": "test-pin"}),
            ("/auth/signup", {"address": {"a": 1}, "password": "x", "pin": "test-pin"}),
            ("/auth/login", {"address": INSTITUTION_A, "password": 12345}),
        ]
        for url, body in cases:
            with self.subTest(url=url, body=body):
                response = self.client.post(url, json=body)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.get_json()["error"], "InvalidInput")

    def test_profile_and_logout(self):
        headers = self.login(ADMIN)
        profile = self.client.get("/auth/profile", headers=headers).get_json()
        self.assertEqual(profile["address"], ADMIN)
        self.assertTrue(profile["is_admin"])

        self.assertEqual(self.client.post("/auth/logout", headers=headers).status_code, 200)
        self.assertEqual(self.client.get("/auth/profile", headers=headers).status_code, 401)


class TestRegistryApi(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.institution = self.login(INSTITUTION_A)
        response = self.client.post("/institutions/register", headers=self.institution,
                                    json={"name": "Institution A", "email": "registrar@a.edu"})
        self.assertEqual(response.status_code, 201)

    def test_full_scenario(self):
        response = self.client.post("/certificates", headers=self.institution, json=self.certificate_payload())
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()["token_id"], 1)

        self.assertEqual(self.client.get("/certificates/total").get_json(), {"total": 1})
        self.assertEqual(self.client.get(f"/holders/{RECIPIENT}/certificates").get_json()["token_ids"], [1])
        stats = self.client.get(f"/institutions/{INSTITUTION_A}/stats").get_json()
        self.assertEqual(stats["issued_count"], 1)

        duplicate = self.client.post("/certificates", headers=self.institution, json=self.certificate_payload())
        self.assertEqual(duplicate.status_code, 409)
        self.assertEqual(duplicate.get_json()["error"], "DuplicateReference")

        stranger = self.login(INSTITUTION_B)
        rejected = self.client.post("/certificates", headers=stranger, json=self.certificate_payload("Qm456"))
        self.assertEqual(rejected.status_code, 403)
        self.assertEqual(rejected.get_json()["error"], "NotAuthorized")

        admin = self.login(ADMIN)
        self.assertEqual(self.client.post(f"/institutions/{INSTITUTION_A}/revoke", headers=admin).status_code, 200)
        after_revoke = self.client.post("/certificates", headers=self.institution, json=self.certificate_payload("Qm789"))
        self.assertEqual(after_revoke.status_code, 403)

        record = self.client.get("/certificates/1").get_json()
        self.assertTrue(record["is_valid"])
        self.assertEqual(self.client.get("/certificates/total").get_json(), {"total": 1})

    def test_future_completion_date(self):
        response = self.client.post("/certificates", headers=self.institution,
                                    json=self.certificate_payload(completion_date="2999-01-01"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["error"], "InvalidInput")

    def test_unparseable_completion_date(self):
        response = self.client.post("/certificates", headers=self.institution,
                                    json=self.certificate_payload(completion_date="not a date"))
        self.assertEqual(response.status_code, 400)

    def test_out_of_range_timestamp_is_invalid_input(self):
        for value in (1e20, -1e20, True):
            with self.subTest(value=value):
                response = self.client.post("/certificates", headers=self.institution,
                                            json=self.certificate_payload(completion_date=value))
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.get_json()["error"], "InvalidInput")

    def test_unauthorized_caller_sees_not_authorized_before_date_errors(self):
        stranger = self.login(INSTITUTION_B)
        for value in (None, "not a date", 1e20):
            with self.subTest(value=value):
                response = self.client.post("/certificates", headers=stranger,
                                            json=self.certificate_payload(completion_date=value))
                self.assertEqual(response.status_code, 403)
                self.assertEqual(response.get_json()["error"], "NotAuthorized")

        response = self.client.post("/certificates/batch", headers=stranger,
                                    json={"recipients": RECIPIENT, "completion_dates": ["not a date"]})
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.get_json()["error"], "NotAuthorized")

    def test_non_text_fields_are_invalid_input(self):
        cases = [
            {"recipient": [RECIPIENT]},
            {"recipient_name": {"first": "Priya"}},
            {"course_name": 101},
            {"grade": ["A"]},
            {"content_ref": []},
            {"content_ref": {"cid": "Qm123"}},
            {"cert_type": False},
        ]
        for overrides in cases:
            with self.subTest(overrides=overrides):
                response = self.client.post("/certificates", headers=self.institution,
                                            json=self.certificate_payload(**overrides))
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.get_json()["error"], "InvalidInput")
        self.assertEqual(self.client.get("/certificates/total").get_json(), {"total": 0})

        response = self.client.put("/institutions/me", headers=self.institution, json={"name": ["A"]})
        self.assertEqual(response.status_code, 400)

    def test_batch_with_non_array_fields(self):
        response = self.client.post("/certificates/batch", headers=self.institution,
                                    json={"recipients": RECIPIENT, "content_refs": "ref-1"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["error"], "InvalidInput")

    def test_issue_from_uploaded_document(self):
        document = b"%PDF-1.4 certificate of completion"
        data = self.certificate_payload()
        del data["content_ref"]
        data["file"] = (io.BytesIO(document), "certificate.pdf")
        response = self.client.post("/certificates", headers=self.institution, data=data,
                                    content_type="multipart/form-data")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()["content_ref"], hash_service.sha256_of_bytes(document))

        check = self.client.post("/certificates/verify-document", data={"file": (io.BytesIO(document), "copy.pdf")},
                                 content_type="multipart/form-data").get_json()
        self.assertTrue(check["exists"])
        self.assertEqual(check["token_id"], 1)

    def test_batch_issue_is_atomic(self):
        batch = {
            "recipients": [RECIPIENT, RECIPIENT],
            "recipient_names": ["One", "Two"],
            "course_names": ["Physics", "Physics"],
            "grades": ["A", "B"],
            "content_refs": ["ref-1", "ref-2"],
            "completion_dates": ["2024-01-01", 1700000000],
            "cert_types": ["Transcript", "Transcript"],
        }
        response = self.client.post("/certificates/batch", headers=self.institution, json=batch)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()["token_ids"], [1, 2])

        batch["content_refs"] = ["ref-3", "ref-1"]
        response = self.client.post("/certificates/batch", headers=self.institution, json=batch)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(self.client.get("/certificates/total").get_json(), {"total": 2})

        batch["grades"] = ["A"]
        response = self.client.post("/certificates/batch", headers=self.institution, json=batch)
        self.assertEqual(response.status_code, 400)

    def test_revoke_and_lookup(self):
        self.client.post("/certificates", headers=self.institution, json=self.certificate_payload())

        stranger = self.login(INSTITUTION_B)
        self.assertEqual(self.client.post("/certificates/1/revoke", headers=stranger).status_code, 403)

        response = self.client.post("/certificates/1/revoke", headers=self.institution)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.get_json()["is_valid"])

        lookup = self.client.get("/certificates/by-ref/Qm123").get_json()
        self.assertTrue(lookup["exists"])
        self.assertFalse(lookup["certificate"]["is_valid"])

        names = [event["name"] for event in self.client.get("/events?token_id=1").get_json()]
        self.assertEqual(names, ["CertificateRevoked", "CertificateIssued"])

    def test_events_filter_by_actor(self):
        self.client.post("/certificates", headers=self.institution, json=self.certificate_payload())
        admin = self.login(ADMIN)
        self.client.post("/certificates/1/revoke", headers=admin)

        found = self.client.get(f"/events?actor={INSTITUTION_A}&name=CertificateIssued").get_json()
        self.assertEqual([(event["token_id"], event["actor"]) for event in found], [(1, INSTITUTION_A)])
        found = self.client.get(f"/events?actor={ADMIN}").get_json()
        self.assertEqual([event["name"] for event in found], ["CertificateRevoked"])

    def test_unknown_lookups(self):
        self.assertEqual(self.client.get("/certificates/99").status_code, 404)
        self.assertEqual(self.client.post("/certificates/99/revoke", headers=self.institution).status_code, 404)
        self.assertEqual(self.client.get("/certificates/99/qr").status_code, 404)

        lookup = self.client.get("/certificates/by-ref/unknownHash").get_json()
        self.assertEqual((lookup["exists"], lookup["token_id"]), (False, 0))
        self.assertEqual(lookup["certificate"]["content_ref"], "")

    def test_qr_code(self):
        self.client.post("/certificates", headers=self.institution, json=self.certificate_payload())
        response = self.client.get("/certificates/1/qr")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.mimetype, "image/png")

    def test_update_profile(self):
        response = self.client.put("/institutions/me", headers=self.institution, json={"name": "", "email": "x"})
        self.assertEqual(response.status_code, 400)
        response = self.client.put("/institutions/me", headers=self.institution, json={"name": "A University", "email": "x@a.edu"})
        self.assertEqual(response.get_json()["name"], "A University")

    def test_registering_twice(self):
        response = self.client.post("/institutions/register", headers=self.institution, json={"name": "Again"})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.get_json()["error"], "AlreadyRegistered")

    def test_mutations_need_a_token(self):
        self.assertEqual(self.client.post("/certificates", json=self.certificate_payload()).status_code, 401)


if __name__ == "__main__":
    unittest.main()
