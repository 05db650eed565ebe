"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags contention   # Many users fight for few seats
  locust -f locustfile.py --tags checkout     # Full hold -> session -> confirm flow
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All tests

Tokens are minted locally with the same secret the API verifies, standing
in for the identity provider. Seats are provisioned once per run by an
admin token.
"""

import random
import uuid

from locust import HttpUser, between, events, tag, task

from reservation_core.core.security import ROLE_ADMIN, create_access_token

CONTENTION_SHOW_ID = 9001
CONTENTION_SEATS = [f"A{i}" for i in range(1, 11)]

CHECKOUT_SHOW_ID = 9002
CHECKOUT_SEATS = [f"{row}{n}" for row in "BCDEFGHJ" for n in range(1, 26)]


def auth_headers(role: str = "user") -> dict:
    token = create_access_token(data={"sub": f"load-{uuid.uuid4().hex[:12]}", "role": role})
    return {"Authorization": f"Bearer {token}"}


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Setup: provision seats for both scenarios."""
    import httpx

    headers = auth_headers(ROLE_ADMIN)
    with httpx.Client(base_url=environment.host) as client:
        for show_id, seats in ((CONTENTION_SHOW_ID, CONTENTION_SEATS), (CHECKOUT_SHOW_ID, CHECKOUT_SEATS)):
            resp = client.post("/api/v1/show-seats/", json={"show_id": show_id, "seats": seats}, headers=headers)
            print(f"\n✓ Show {show_id}: {resp.status_code} {resp.text}\n")


class ContentionUser(HttpUser):
    """
    TEST 1: Contention - 100 users -> 10 seats

    Run: locust -f locustfile.py --tags contention -u 100 -r 50 --run-time 30s

    After test, verify no seat was sold twice:
      SELECT show_id, seat_label, COUNT(*) FROM booking_seats
      GROUP BY show_id, seat_label HAVING COUNT(*) > 1;
    Should return no rows.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.headers = auth_headers()

    @tag("contention")
    @task
    def grab_and_pay(self):
        seat = random.choice(CONTENTION_SEATS)
        with self.client.post("/api/v1/holds/validate",
            json={"show_id": CONTENTION_SHOW_ID, "seats": [seat]},
            headers=self.headers,
            name="/holds/validate [contention]",
            catch_response=True
        ) as resp:
            if resp.status_code == 409:
                resp.success()  # Expected: held or sold by someone else
                return
            if resp.status_code != 200:
                resp.failure(f"Unexpected: {resp.status_code}")
                return

        session = self.client.post("/api/v1/payments/session",
            json={"show_id": CONTENTION_SHOW_ID, "seats": [seat], "amount": "100"},
            headers=self.headers,
            name="/payments/session [contention]")
        if session.status_code != 201:
            return

        with self.client.post("/api/v1/payments/confirm",
            json={"session_id": session.json()["session_id"]},
            headers=self.headers,
            name="/payments/confirm [contention]",
            catch_response=True
        ) as resp:
            if resp.status_code in (200, 409, 410):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class CheckoutUser(HttpUser):
    """
    TEST 2: Checkout throughput with occasional abandonment

    Run: locust -f locustfile.py --tags checkout -u 50 -r 10 --run-time 60s

    A share of users cancel instead of paying; their seats must come back.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = auth_headers()

    @tag("checkout")
    @task(5)
    def browse(self):
        self.client.get(f"/api/v1/show-seats/{CHECKOUT_SHOW_ID}", headers=self.headers,
            name="/show-seats/{id}")

    @tag("checkout")
    @task(3)
    def checkout(self):
        seats = random.sample(CHECKOUT_SEATS, random.randint(1, 4))
        resp = self.client.post("/api/v1/holds/",
            json={"show_id": CHECKOUT_SHOW_ID, "seats": seats},
            headers=self.headers,
            name="/holds/")
        if resp.status_code != 200:
            self.client.post("/api/v1/holds/release",
                json={"show_id": CHECKOUT_SHOW_ID, "seats": seats},
                headers=self.headers,
                name="/holds/release")
            return

        session = self.client.post("/api/v1/payments/session",
            json={"show_id": CHECKOUT_SHOW_ID, "seats": seats, "amount": str(150 * len(seats))},
            headers=self.headers,
            name="/payments/session")
        if session.status_code != 201:
            return
        session_id = session.json()["session_id"]

        if random.random() < 0.2:
            self.client.post("/api/v1/payments/cancel", json={"session_id": session_id},
                headers=self.headers, name="/payments/cancel")
        else:
            self.client.post("/api/v1/payments/confirm", json={"session_id": session_id},
                headers=self.headers, name="/payments/confirm")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = auth_headers()

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def empty_seat_list(self):
        with self.client.post("/api/v1/holds/", json={"show_id": CHECKOUT_SHOW_ID, "seats": []},
            headers=self.headers, catch_response=True) as resp:
            self._expect(resp, (400, 422))

    @tag("edge")
    @task
    def blank_label(self):
        with self.client.post("/api/v1/holds/", json={"show_id": CHECKOUT_SHOW_ID, "seats": ["   "]},
            headers=self.headers, catch_response=True) as resp:
            self._expect(resp, (400, 422))

    @tag("edge")
    @task
    def unknown_session(self):
        with self.client.post("/api/v1/payments/confirm", json={"session_id": "pay_nope"},
            headers=self.headers, catch_response=True) as resp:
            self._expect(resp, (410,))

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.post("/api/v1/holds/", json={"show_id": CHECKOUT_SHOW_ID, "seats": ["B1"]},
            catch_response=True) as resp:
            self._expect(resp, (401,))
