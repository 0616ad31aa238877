# collaborations/tests/test_concurrency.py
import threading
import unittest

from django.db import connection, connections
from django.test import TransactionTestCase

from collaborations.exceptions import AlreadyDecidedError, CapacityExceededError
from collaborations.models import Application, Collaboration, Requirement
from collaborations.services import applications as ledger
from collaborations.services import collaborations as aggregate

from .helpers import make_application, make_collaboration, make_user


@unittest.skipUnless(
    connection.features.has_select_for_update,
    "needs a database with row-level locking (e.g. PostgreSQL)",
)
class ConcurrentDecisionTests(TransactionTestCase):
    """Concurrent requests against one collaboration end in a domain outcome, never a deadlock."""

    def test_concurrent_accepts_on_last_slot(self):
        creator = make_user("creator")
        collaboration = make_collaboration(creator, roles=(("Cellist", 1),))
        requirement = collaboration.requirements.get()
        applications = [
            make_application(requirement, make_user("ana")),
            make_application(requirement, make_user("ben")),
        ]

        barrier = threading.Barrier(len(applications))
        outcomes = []
        lock = threading.Lock()

        def accept(application_id):
            result = "error"
            try:
                barrier.wait()
                ledger.decide(application_id, ledger.DECISION_ACCEPT, creator)
                result = "accepted"
            except CapacityExceededError:
                result = "capacity_exceeded"
            finally:
                connections.close_all()
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=accept, args=(a.pk,)) for a in applications]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        self.assertEqual(sorted(outcomes), ["accepted", "capacity_exceeded"])

        requirement.refresh_from_db()
        self.assertEqual(requirement.quantity_filled, 1)
        self.assertEqual(requirement.status, Requirement.STATUS_CLOSED)
        self.assertEqual(
            sorted(Application.objects.values_list("status", flat=True)),
            [Application.STATUS_ACCEPTED, Application.STATUS_PENDING],
        )

    def test_accept_racing_cancel_ends_in_a_domain_outcome(self):
        creator = make_user("creator")
        collaboration = make_collaboration(creator, roles=(("Cellist", 2),))
        requirement = collaboration.requirements.get()
        application = make_application(requirement, make_user("ana"))

        barrier = threading.Barrier(2)
        outcomes = {}
        lock = threading.Lock()

        def run(name, action):
            result = "error"
            try:
                barrier.wait()
                action()
                result = "ok"
            except AlreadyDecidedError:
                result = "already_decided"
            except Exception as exc:
                result = f"error: {exc.__class__.__name__}"
            finally:
                connections.close_all()
            with lock:
                outcomes[name] = result

        threads = [
            threading.Thread(
                target=run,
                args=("accept", lambda: ledger.decide(application.pk, ledger.DECISION_ACCEPT, creator)),
            ),
            threading.Thread(
                target=run,
                args=("cancel", lambda: aggregate.cancel_collaboration(collaboration.pk, creator)),
            ),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        self.assertEqual(outcomes["cancel"], "ok")
        self.assertIn(outcomes["accept"], ("ok", "already_decided"))

        application.refresh_from_db()
        requirement.refresh_from_db()
        collaboration.refresh_from_db()
        self.assertEqual(collaboration.status, Collaboration.STATUS_CANCELLED)
        self.assertEqual(requirement.status, Requirement.STATUS_CLOSED)
        if outcomes["accept"] == "ok":
            self.assertEqual(application.status, Application.STATUS_ACCEPTED)
            self.assertEqual(requirement.quantity_filled, 1)
        else:
            self.assertEqual(application.status, Application.STATUS_REJECTED)
            self.assertEqual(requirement.quantity_filled, 0)
