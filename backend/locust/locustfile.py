"""
Locust load scenarios for the Eventhub API.

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Last-ticket races
  locust -f locustfile.py --tags throughput   # Cached listing
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # Everything

After a concurrency run, the inventory report must stay consistent:
  GET /api/v1/events/<id>/inventory  (admin token)  ->  "consistent": true
"""

import random
import string
from datetime import datetime, timezone, timedelta

from locust import HttpUser, task, between, tag, events

PASSWORD = "loadtest123"

# Shared state
EVENT_IDS = []
CONCURRENCY_EVENT_ID = None


def random_email():
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=10))
    return f"load_{suffix}@test.com"


def future_date(days: int = 30) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def event_payload(title: str, capacity: int, price: float = 20.0) -> dict:
    return {
        "title": title,
        "description": "Load test event",
        "location": "Test Hall",
        "date": future_date(random.randint(1, 90)),
        "startTime": "19:00",
        "endTime": "22:00",
        "capacity": capacity,
        "price": price,
        "isPublished": True,
    }


def register(client, role: str = "user") -> dict:
    """Register a fresh account and return auth headers (empty on failure)."""
    resp = client.post("/api/v1/auth/register", json={
        "name": "Load Tester",
        "email": random_email(),
        "password": PASSWORD,
        "role": role,
    }, name="/api/v1/auth/register")
    if resp.status_code != 201:
        return {}
    return {"Authorization": f"Bearer {resp.json()['data']['token']}"}


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print("Eventhub load test starting")
    print("=" * 60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: 100 users race for 10 tickets.

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    Afterwards:
      SELECT SUM(ticket_count) FROM bookings WHERE event_id = X AND status <> 'cancelled';
    must be <= 10, and events.available_tickets must equal 10 minus that sum.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        global CONCURRENCY_EVENT_ID

        if not CONCURRENCY_EVENT_ID:
            organizer = register(self.client, role="organizer")
            resp = self.client.post(
                "/api/v1/events",
                json=event_payload("Concurrency Test Event", capacity=10),
                headers=organizer,
            )
            if resp.status_code == 201 and not CONCURRENCY_EVENT_ID:
                CONCURRENCY_EVENT_ID = resp.json()["data"]["id"]
                print(f"\nCreated event {CONCURRENCY_EVENT_ID} with 10 tickets\n")

        self.headers = register(self.client)

    @tag("concurrency")
    @task
    def book_last_tickets(self):
        """Everyone fights for the same 10 tickets."""
        if not CONCURRENCY_EVENT_ID or not self.headers:
            return

        with self.client.post(
            "/api/v1/bookings",
            json={"event": CONCURRENCY_EVENT_ID, "ticketCount": 1},
            headers=self.headers,
            catch_response=True,
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 400 and resp.json().get("error") == "Not enough tickets available":
                resp.success()  # Expected: sold out
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Listing throughput with and without Redis.

    Run twice (REDIS_ENABLED=true, then false):
      locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
    and compare average latency, requests/sec and P95/P99.
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_events_cached(self):
        page = random.randint(1, 5)
        self.client.get(f"/api/v1/events?page={page}&limit=20", name="/api/v1/events [cached]")

    @tag("throughput", "read")
    @task(3)
    def get_event_detail(self):
        if EVENT_IDS:
            self.client.get(f"/api/v1/events/{random.choice(EVENT_IDS)}", name="/api/v1/events/{id}")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Bad input must come back as 4xx envelopes, never 5xx.

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = register(self.client)

    def _expect(self, resp, codes):
        if resp.status_code in codes and resp.json().get("success") is False:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_event(self):
        with self.client.post(
            "/api/v1/bookings",
            json={"event": 999999, "ticketCount": 1},
            headers=self.headers,
            catch_response=True,
        ) as resp:
            self._expect(resp, [404])

    @tag("edge")
    @task
    def ticket_count_out_of_range(self):
        count = random.choice([-5, 0, 11, 999999])
        with self.client.post(
            "/api/v1/bookings",
            json={"event": 1, "ticketCount": count},
            headers=self.headers,
            catch_response=True,
            name="/api/v1/bookings [bad count]",
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post(
            "/api/v1/bookings",
            data="not json at all",
            headers={**self.headers, "Content-Type": "application/json"},
            catch_response=True,
            name="/api/v1/bookings [garbage]",
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.post(
            "/api/v1/bookings",
            json={"event": 1, "ticketCount": 1},
            catch_response=True,
            name="/api/v1/bookings [no auth]",
        ) as resp:
            self._expect(resp, [401])

    @tag("edge")
    @task
    def cancel_someone_elses_booking(self):
        booking_id = random.randint(1, 1000)
        with self.client.put(
            f"/api/v1/bookings/{booking_id}/cancel",
            headers=self.headers,
            catch_response=True,
            name="/api/v1/bookings/{id}/cancel [foreign]",
        ) as resp:
            self._expect(resp, [400, 403, 404])


class RealisticUser(HttpUser):
    """
    TEST 4: Mixed workload.

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Mostly browsing, some bookings and cancellations, rare event creation
    by a few organizers.
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.is_organizer = random.random() < 0.05
        self.headers = register(self.client, role="organizer" if self.is_organizer else "user")
        self.booking_ids = []

    @task(50)
    def browse_events(self):
        resp = self.client.get("/api/v1/events?page=1&limit=20", name="/api/v1/events [cached]")
        if resp.status_code == 200:
            for event in resp.json().get("data", []):
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @task(20)
    def view_event(self):
        if EVENT_IDS:
            self.client.get(f"/api/v1/events/{random.choice(EVENT_IDS)}", name="/api/v1/events/{id}")

    @task(10)
    def book_tickets(self):
        if self.is_organizer or not EVENT_IDS or not self.headers:
            return
        resp = self.client.post(
            "/api/v1/bookings",
            json={"event": random.choice(EVENT_IDS), "ticketCount": random.randint(1, 3)},
            headers=self.headers,
        )
        if resp.status_code == 201:
            self.booking_ids.append(resp.json()["data"]["id"])

    @task(4)
    def cancel_booking(self):
        if not self.booking_ids:
            return
        booking_id = self.booking_ids.pop(random.randrange(len(self.booking_ids)))
        self.client.put(
            f"/api/v1/bookings/{booking_id}/cancel",
            headers=self.headers,
            name="/api/v1/bookings/{id}/cancel",
        )

    @task(3)
    def create_event(self):
        if not self.is_organizer or not self.headers:
            return
        resp = self.client.post(
            "/api/v1/events",
            json=event_payload(f"Event {random.randint(1, 10000)}", capacity=random.randint(10, 500)),
            headers=self.headers,
        )
        if resp.status_code == 201:
            EVENT_IDS.append(resp.json()["data"]["id"])
