from locust import HttpUser, task, between
import os
import json
import random
import uuid


TRACKING_CODES = os.getenv(
    "LOCUST_TRACKING_CODES", "SEED_IG_REEL,SEED_TT_VIDEO,SEED_YT_VIDEO"
).split(",")


class Shopper(HttpUser):
    """Anonymous storefront traffic: landing visits, activity pings and the odd attributed order."""

    wait_time = between(0.5, 2.5)

    def on_start(self):
        self.session_id = uuid.uuid4().hex
        self.headers = {"Content-Type": "application/json"}

    @task(5)
    def land(self):
        payload = json.dumps({
            "tracking_code": random.choice(TRACKING_CODES),
            "session_id": self.session_id,
            "landing_page": "/products/summer",
        })
        self.client.post("/api/v1/tracking/visit/", data=payload, headers=self.headers)

    @task(3)
    def browse(self):
        payload = json.dumps({"session_id": self.session_id})
        self.client.post("/api/v1/tracking/activity/", data=payload, headers=self.headers,
                         name="/api/v1/tracking/activity/")


class AuthenticatedUser(HttpUser):
    """Locust user that authenticates via JWT before running reporting tasks."""

    wait_time = between(0.5, 2.5)

    def on_start(self):
        self.headers = {"Content-Type": "application/json"}
        self.campaign_ids = []

        login_payload = json.dumps({
            "username": os.getenv("LOCUST_USERNAME", "testuser"),
            "password": os.getenv("LOCUST_PASSWORD", "testpass123"),
        })
        with self.client.post(
            "/api/v1/auth/token/",
            data=login_payload,
            headers=self.headers,
            catch_response=True,
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Login failed: {resp.status_code}")
                return
            self.headers["Authorization"] = f"Bearer {resp.json()['access']}"
            resp.success()

        resp = self.client.get("/api/v1/campaigns/", headers=self.headers)
        if resp.status_code == 200:
            self.campaign_ids = [c["id"] for c in resp.json()]

    @task(3)
    def list_campaigns(self):
        self.client.get("/api/v1/campaigns/", headers=self.headers)

    @task(3)
    def campaign_analytics(self):
        if not self.campaign_ids:
            return
        campaign_id = random.choice(self.campaign_ids)
        self.client.get(
            f"/api/v1/analytics/campaigns/{campaign_id}/?include_timeline=true",
            headers=self.headers,
            name="/api/v1/analytics/campaigns/[id]/",
        )

    @task(2)
    def leaderboard(self):
        metric = random.choice(["roi", "revenue", "conversions", "visits"])
        self.client.get(f"/api/v1/analytics/leaderboard/?metric={metric}", headers=self.headers,
                        name="/api/v1/analytics/leaderboard/")

    @task(1)
    def overview(self):
        self.client.get("/api/v1/analytics/overview/", headers=self.headers)

    @task(1)
    def attribute_order(self):
        payload = json.dumps({
            "session_id": uuid.uuid4().hex,
            "order_id": f"LOAD-{uuid.uuid4().hex[:12]}",
            "customer_id": "load-test",
            "order_total": "49.90",
        })
        # unknown sessions answer 200 with attributed=false
        self.client.post("/api/v1/tracking/attribute/", data=payload, headers=self.headers)


# Useful for headless CSV output: `locust --headless -u 50 -r 5 -t 2m -f locustfile.py --csv out --host http://localhost:8070`
