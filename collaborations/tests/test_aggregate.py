# collaborations/tests/test_aggregate.py
from django.test import TestCase, override_settings

from collaborations import state_machine
from collaborations.exceptions import (
    CollaborationValidationError,
    InvalidTransitionError,
    UnauthorizedError,
)
from collaborations.models import Application, Collaboration, Requirement
from collaborations import services

from .helpers import make_application, make_collaboration, make_user


class DeriveProgressTests(TestCase):
    def test_percentages_round_to_nearest(self):
        cases = [
            (0, 4, 0),
            (1, 2, 50),
            (1, 3, 33),
            (2, 3, 67),
            (1, 8, 13),  # 12.5 rounds up
            (5, 5, 100),
        ]
        for filled, needed, expected in cases:
            requirement = Requirement(quantity_filled=filled, quantity_needed=needed)
            self.assertEqual(services.derive_progress(requirement), expected, f"{filled}/{needed}")


class StaffingTests(TestCase):
    def setUp(self):
        self.creator = make_user("creator")
        self.ana = make_user("ana")
        self.collaboration = make_collaboration(self.creator, roles=(("Singer", 1), ("Producer", 1)))
        self.singer, self.producer = self.collaboration.requirements.order_by("position")

    def test_fully_staffed_is_informational(self):
        self.assertFalse(services.is_fully_staffed(self.collaboration))

        application = services.submit_application(self.singer.pk, self.ana, "Alto")
        services.decide(application.pk, services.DECISION_ACCEPT, self.creator)
        services.force_close_requirement(self.producer.pk, self.creator)

        collaboration = services.get_collaboration(self.collaboration.pk)
        self.assertTrue(services.is_fully_staffed(collaboration))
        self.assertEqual(
            collaboration.status,
            Collaboration.STATUS_ACTIVE,
            "fully staffed projects are never auto-completed",
        )

    def test_force_close_requires_creator(self):
        with self.assertRaises(UnauthorizedError):
            services.force_close_requirement(self.producer.pk, self.ana)
        self.producer.refresh_from_db()
        self.assertEqual(self.producer.status, Requirement.STATUS_OPEN)


class CreateCollaborationTests(TestCase):
    def setUp(self):
        self.creator = make_user("creator")

    def test_creates_requirements_in_order(self):
        collaboration = services.create_collaboration(
            self.creator,
            "Short Film",
            "Indie horror short",
            [
                {"role": "Director of Photography", "quantity_needed": 1},
                {"role": "Grip", "quantity_needed": 3, "location": "Porto"},
            ],
        )
        roles = [(r.role, r.position, r.status) for r in collaboration.requirements.all()]
        self.assertEqual(
            roles,
            [
                ("Director of Photography", 0, Requirement.STATUS_OPEN),
                ("Grip", 1, Requirement.STATUS_OPEN),
            ],
        )
        self.assertEqual(collaboration.status, Collaboration.STATUS_ACTIVE)
        self.assertEqual(collaboration.creator, self.creator)

    def test_title_and_requirements_are_required(self):
        with self.assertRaises(CollaborationValidationError):
            services.create_collaboration(self.creator, "  ", "", [{"role": "Grip", "quantity_needed": 1}])
        with self.assertRaises(CollaborationValidationError):
            services.create_collaboration(self.creator, "Film", "", [])
        self.assertFalse(Collaboration.objects.exists())

    def test_bad_requirement_stores_nothing(self):
        with self.assertRaises(CollaborationValidationError):
            services.create_collaboration(
                self.creator,
                "Film",
                "",
                [{"role": "Grip", "quantity_needed": 2}, {"role": "Gaffer", "quantity_needed": 0}],
            )
        self.assertFalse(Collaboration.objects.exists())
        self.assertFalse(Requirement.objects.exists())

    @override_settings(COLLAB_MAX_REQUIREMENTS=2)
    def test_requirement_limit(self):
        specs = [{"role": f"Role {i}", "quantity_needed": 1} for i in range(3)]
        with self.assertRaises(CollaborationValidationError):
            services.create_collaboration(self.creator, "Film", "", specs)


class EditCollaborationTests(TestCase):
    def setUp(self):
        self.creator = make_user("creator")
        self.stranger = make_user("stranger")
        self.collaboration = make_collaboration(self.creator)

    def test_creator_updates_title(self):
        updated = services.update_collaboration(
            self.collaboration.pk, self.creator, {"title": "Beach Wedding", "status": "completed"}
        )
        self.assertEqual(updated.title, "Beach Wedding")
        self.assertEqual(updated.status, Collaboration.STATUS_ACTIVE)

    def test_stranger_cannot_edit(self):
        with self.assertRaises(UnauthorizedError):
            services.update_collaboration(self.collaboration.pk, self.stranger, {"title": "Mine now"})

    def test_add_requirement_appends(self):
        requirement = services.add_requirement(
            self.collaboration.pk, self.creator, {"role": "Videographer", "quantity_needed": 1}
        )
        self.assertEqual(requirement.position, 1)
        self.assertEqual(self.collaboration.requirements.count(), 2)

    def test_add_requirement_to_cancelled_collaboration(self):
        services.cancel_collaboration(self.collaboration.pk, self.creator)
        with self.assertRaises(InvalidTransitionError):
            services.add_requirement(
                self.collaboration.pk, self.creator, {"role": "Videographer", "quantity_needed": 1}
            )


class FinishCollaborationTests(TestCase):
    def setUp(self):
        self.creator = make_user("creator")
        self.ana = make_user("ana")
        self.ben = make_user("ben")
        self.collaboration = make_collaboration(self.creator, roles=(("Painter", 2),))
        self.requirement = self.collaboration.requirements.get()

    def test_cancel_closes_requirements_and_rejects_pending(self):
        accepted = services.submit_application(self.requirement.pk, self.ana, "hi")
        services.decide(accepted.pk, services.DECISION_ACCEPT, self.creator)
        pending = services.submit_application(self.requirement.pk, self.ben, "hi")

        collaboration = services.cancel_collaboration(self.collaboration.pk, self.creator)

        self.assertEqual(collaboration.status, Collaboration.STATUS_CANCELLED)
        self.requirement.refresh_from_db()
        self.assertEqual(self.requirement.status, Requirement.STATUS_CLOSED)
        self.assertEqual(self.requirement.quantity_filled, 1)
        pending.refresh_from_db()
        accepted.refresh_from_db()
        self.assertEqual(pending.status, Application.STATUS_REJECTED)
        self.assertEqual(accepted.status, Application.STATUS_ACCEPTED)

    def test_complete_then_cancel_is_invalid(self):
        services.complete_collaboration(self.collaboration.pk, self.creator)
        with self.assertRaises(InvalidTransitionError):
            services.cancel_collaboration(self.collaboration.pk, self.creator)

        self.collaboration.refresh_from_db()
        self.assertEqual(self.collaboration.status, Collaboration.STATUS_COMPLETED)

    def test_only_creator_finishes(self):
        with self.assertRaises(UnauthorizedError):
            services.complete_collaboration(self.collaboration.pk, self.ana)
        self.collaboration.refresh_from_db()
        self.assertEqual(self.collaboration.status, Collaboration.STATUS_ACTIVE)

    def test_state_machine_transitions(self):
        self.assertEqual(
            state_machine.get_allowed_transitions(self.collaboration),
            [Collaboration.STATUS_COMPLETED, Collaboration.STATUS_CANCELLED],
        )
        ok, _ = state_machine.can_transition(self.collaboration, Collaboration.STATUS_ACTIVE)
        self.assertFalse(ok)
        ok, _ = state_machine.can_transition(self.collaboration, "archived")
        self.assertFalse(ok)
        self.assertTrue(state_machine.is_terminal_status(Collaboration.STATUS_CANCELLED))
        self.assertFalse(state_machine.is_terminal_status(Collaboration.STATUS_ACTIVE))

        with self.assertRaises(InvalidTransitionError):
            state_machine.transition(self.collaboration, Collaboration.STATUS_ACTIVE, actor=self.creator)
        state_machine.transition(self.collaboration, Collaboration.STATUS_COMPLETED, actor=self.creator)
        self.collaboration.refresh_from_db()
        self.assertEqual(self.collaboration.status, Collaboration.STATUS_COMPLETED)
        self.assertEqual(state_machine.get_allowed_transitions(self.collaboration), [])


class ListingTests(TestCase):
    def setUp(self):
        self.alice = make_user("alice")
        self.bob = make_user("bob")
        self.wedding = make_collaboration(self.alice, title="Wedding Shoot")
        self.album = make_collaboration(self.bob, title="Debut Album", roles=(("Bassist", 1),))
        self.old = make_collaboration(self.alice, title="Old Gallery Show", roles=(("Curator", 1),))
        services.cancel_collaboration(self.old.pk, self.alice)

    def test_browse_defaults_to_active(self):
        titles = set(services.list_collaborations().values_list("title", flat=True))
        self.assertEqual(titles, {"Wedding Shoot", "Debut Album"})

    def test_browse_filters(self):
        self.assertEqual(
            list(services.list_collaborations({"q": "album"})),
            [self.album],
        )
        self.assertEqual(
            list(services.list_collaborations({"role": "photo"})),
            [self.wedding],
        )
        self.assertEqual(
            list(services.list_collaborations({"skill": "portrait", "creator": self.bob.pk})),
            [self.album],
        )
        self.assertEqual(
            list(services.list_collaborations({"status": "cancelled"})),
            [self.old],
        )
        self.assertEqual(services.list_collaborations({"status": "all"}).count(), 3)

    def test_unknown_status_filter(self):
        with self.assertRaises(CollaborationValidationError):
            services.list_collaborations({"status": "archived"})

    def test_user_collaborations_include_every_status(self):
        titles = set(services.list_user_collaborations(self.alice.pk).values_list("title", flat=True))
        self.assertEqual(titles, {"Wedding Shoot", "Old Gallery Show"})
