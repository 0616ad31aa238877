# collaborations/tests/test_api.py
from unittest import mock

from django.core.cache import cache
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from collaborations.models import Application, Collaboration, Requirement

from .helpers import make_application, make_collaboration, make_user


class CollaborationApiTests(APITestCase):
    def setUp(self):
        cache.clear()  # throttle history
        self.creator = make_user("creator")
        self.ana = make_user("ana")
        self.ben = make_user("ben")
        self.collaboration = make_collaboration(self.creator, roles=(("Photographer", 1),))
        self.requirement = self.collaboration.requirements.get()

    def test_browse_is_public_and_paginated(self):
        make_collaboration(self.ana, title="Podcast Pilot")

        r = self.client.get(reverse("collaboration-list"), {"limit": 1})
        self.assertEqual(r.status_code, status.HTTP_200_OK, r.data)
        self.assertEqual(r.data["count"], 2)
        self.assertEqual(len(r.data["results"]), 1)

        first = r.data["results"][0]
        self.assertIn("requirements", first)
        self.assertNotIn("applications", first["requirements"][0])

    def test_browse_filters_by_creator(self):
        make_collaboration(self.ana, title="Podcast Pilot")

        r = self.client.get(reverse("collaboration-list"), {"creator": self.ana.id})
        self.assertEqual(r.status_code, status.HTTP_200_OK, r.data)
        self.assertEqual([c["title"] for c in r.data["results"]], ["Podcast Pilot"])

    def test_browse_rejects_non_numeric_creator(self):
        r = self.client.get(reverse("collaboration-list"), {"creator": "abc"})
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["code"], "validation_error")

    def test_create_collaboration(self):
        self.client.force_authenticate(self.ana)
        payload = {
            "title": "Album Cover",
            "description": "Vinyl release",
            "requirements": [
                {"role": "Illustrator", "quantity_needed": 1, "skills": ["Gouache"]},
                {"role": "Letterer", "quantity_needed": 2},
            ],
        }
        r = self.client.post(reverse("collaboration-list"), payload, format="json")

        self.assertEqual(r.status_code, status.HTTP_201_CREATED, r.data)
        self.assertEqual(r.data["creator"]["id"], self.ana.id)
        self.assertEqual([req["role"] for req in r.data["requirements"]], ["Illustrator", "Letterer"])
        self.assertEqual(r.data["requirements"][1]["progress"], 0)

    def test_create_without_requirements(self):
        self.client.force_authenticate(self.ana)
        r = self.client.post(
            reverse("collaboration-list"),
            {"title": "Nothing", "requirements": []},
            format="json",
        )
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["code"], "validation_error")
        self.assertFalse(Collaboration.objects.filter(title="Nothing").exists())

    def test_create_requires_authentication(self):
        r = self.client.post(
            reverse("collaboration-list"),
            {"title": "Anon", "requirements": [{"role": "X", "quantity_needed": 1}]},
            format="json",
        )
        self.assertEqual(r.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(r.data["success"])

    def test_apply_and_accept_flow(self):
        # 1) Applicant checks eligibility and applies
        self.client.force_authenticate(self.ana)
        eligibility_url = reverse("requirement-eligibility", args=[self.requirement.id])
        r = self.client.get(eligibility_url)
        self.assertEqual(r.data["can_apply"], True)

        r = self.client.post(
            reverse("requirement-apply", args=[self.requirement.id]),
            {"message": "Portfolio: ana.photo"},
            format="json",
        )
        self.assertEqual(r.status_code, status.HTTP_201_CREATED, r.data)
        application_id = r.data["id"]
        self.assertEqual(r.data["status"], "pending")

        r = self.client.get(eligibility_url)
        self.assertEqual(r.data["can_apply"], False)
        self.assertEqual(r.data["reason"], "duplicate_application")

        # 2) Creator sees the applicant and accepts
        self.client.force_authenticate(self.creator)
        r = self.client.get(reverse("requirement-applications", args=[self.requirement.id]))
        self.assertEqual([a["id"] for a in r.data], [application_id])

        r = self.client.post(
            reverse("application-decide", args=[application_id]),
            {"decision": "accept"},
            format="json",
        )
        self.assertEqual(r.status_code, status.HTTP_200_OK, r.data)
        self.assertEqual(r.data["status"], "accepted")

        self.requirement.refresh_from_db()
        self.assertEqual(self.requirement.status, Requirement.STATUS_CLOSED)

        # 3) Applicant sees the outcome in their own list
        self.client.force_authenticate(self.ana)
        r = self.client.get(reverse("my-applications"))
        self.assertEqual(r.data[0]["status"], "accepted")
        self.assertEqual(r.data[0]["collaboration"]["id"], self.collaboration.id)
        self.assertEqual(r.data[0]["requirement"]["progress"], 100)

    def test_apply_with_blank_message(self):
        self.client.force_authenticate(self.ana)
        r = self.client.post(
            reverse("requirement-apply", args=[self.requirement.id]),
            {"message": "   "},
            format="json",
        )
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["code"], "empty_message")
        self.assertFalse(Application.objects.exists())

    def test_apply_requires_authentication(self):
        r = self.client.post(
            reverse("requirement-apply", args=[self.requirement.id]),
            {"message": "hi"},
            format="json",
        )
        self.assertEqual(r.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(r.data["code"], "not_authenticated")

    def test_apply_to_missing_requirement(self):
        self.client.force_authenticate(self.ana)
        r = self.client.post(reverse("requirement-apply", args=[987654]), {"message": "hi"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(r.data["code"], "not_found")

    def test_non_creator_decision_is_forbidden(self):
        application = make_application(self.requirement, self.ana)

        self.client.force_authenticate(self.ben)
        r = self.client.post(
            reverse("application-decide", args=[application.id]),
            {"decision": "accept"},
            format="json",
        )
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(r.data["code"], "unauthorized")

        application.refresh_from_db()
        self.assertEqual(application.status, Application.STATUS_PENDING)

    def test_error_codes_for_closed_and_full(self):
        first = make_application(self.requirement, self.ana)
        second = make_application(self.requirement, self.ben)

        self.client.force_authenticate(self.creator)
        decide_url = lambda app: reverse("application-decide", args=[app.id])
        r = self.client.post(decide_url(first), {"decision": "accept"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK)

        r = self.client.post(decide_url(second), {"decision": "accept"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(r.data["code"], "capacity_exceeded")

        r = self.client.post(decide_url(first), {"decision": "reject"}, format="json")
        self.assertEqual(r.data["code"], "already_decided")

        newcomer = make_user("newcomer")
        self.client.force_authenticate(newcomer)
        r = self.client.post(
            reverse("requirement-apply", args=[self.requirement.id]),
            {"message": "late"},
            format="json",
        )
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(r.data["code"], "requirement_closed")

    def test_invalid_decision_value(self):
        application = make_application(self.requirement, self.ana)
        self.client.force_authenticate(self.creator)
        r = self.client.post(
            reverse("application-decide", args=[application.id]),
            {"decision": "maybe"},
            format="json",
        )
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data["code"], "validation_error")

    def test_applications_visible_only_to_creator(self):
        make_application(self.requirement, self.ana)
        user_url = reverse("user-collaborations", args=[self.creator.id])

        self.client.force_authenticate(self.ben)
        r = self.client.get(user_url)
        self.assertNotIn("applications", r.data[0]["requirements"][0])
        r = self.client.get(reverse("requirement-applications", args=[self.requirement.id]))
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.creator)
        r = self.client.get(user_url)
        self.assertEqual(len(r.data[0]["requirements"][0]["applications"]), 1)
        r = self.client.get(reverse("my-collaborations"))
        self.assertEqual(r.data[0]["id"], self.collaboration.id)
        self.assertEqual(len(r.data[0]["requirements"][0]["applications"]), 1)

    def test_creator_edits_and_cancels(self):
        detail_url = reverse("collaboration-detail", args=[self.collaboration.id])

        self.client.force_authenticate(self.ana)
        r = self.client.patch(detail_url, {"title": "Hijacked"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.creator)
        r = self.client.patch(detail_url, {"title": "Garden Wedding"}, format="json")
        self.assertEqual(r.status_code, status.HTTP_200_OK, r.data)
        self.assertEqual(r.data["title"], "Garden Wedding")
        self.assertEqual(r.data["allowed_transitions"], ["completed", "cancelled"])

        r = self.client.post(
            reverse("requirement-create", args=[self.collaboration.id]),
            {"role": "Florist", "quantity_needed": 1},
            format="json",
        )
        self.assertEqual(r.status_code, status.HTTP_201_CREATED, r.data)

        r = self.client.post(reverse("collaboration-cancel", args=[self.collaboration.id]))
        self.assertEqual(r.data["status"], "cancelled")
        self.assertEqual(r.data["allowed_transitions"], [])
        self.assertTrue(all(req["status"] == "closed" for req in r.data["requirements"]))

        r = self.client.post(reverse("collaboration-complete", args=[self.collaboration.id]))
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(r.data["code"], "invalid_transition")

    def test_force_close_requirement(self):
        pending = make_application(self.requirement, self.ana)
        close_url = reverse("requirement-close", args=[self.requirement.id])

        self.client.force_authenticate(self.creator)
        r = self.client.post(close_url)
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data["status"], "closed")

        # Idempotent
        r = self.client.post(close_url)
        self.assertEqual(r.status_code, status.HTTP_200_OK)

        pending.refresh_from_db()
        self.assertEqual(pending.status, Application.STATUS_REJECTED)

    def test_health(self):
        r = self.client.get(reverse("health-check"))
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertTrue(r.data["db"])
        self.assertEqual(r.data["status"], "ok")

    def test_health_reports_unreachable_database(self):
        with mock.patch("core.views._database_round_trip", return_value=(False, None)):
            r = self.client.get(reverse("health-check"))
        self.assertEqual(r.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(r.data["status"], "degraded")
