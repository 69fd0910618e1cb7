"""
College Confessions live smoke check
Walks the main user and moderator flows against a running deployment

    API_URL=https://confessions.example.com python live_check.py
"""

import json
import os
import sys
from dataclasses import dataclass
from typing import Optional

import requests

BASE_URL = os.environ.get("API_URL", "http://localhost:8081")
ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "secretchat2024")

SAMPLE_CONFESSION = "Smoke check: I have never once returned a library book on time."


@dataclass
class CheckResult:
    name: str
    passed: bool
    message: str
    response_data: Optional[dict] = None


class ConfessionsLiveChecker:
    def __init__(self, base_url: str = BASE_URL):
        self.base_url = base_url
        self.results: list[CheckResult] = []
        self.session_token: Optional[str] = None
        self.admin_token: Optional[str] = None
        self.confession_id: Optional[int] = None

    def run_all_checks(self):
        """Run every check in order; later checks reuse earlier state"""
        print("\n" + "=" * 60)
        print("COLLEGE CONFESSIONS LIVE CHECK")
        print(f"Target: {self.base_url}")
        print("=" * 60 + "\n")

        self.check_health()
        self.check_session()
        self.check_colleges()
        self.check_daily_limit()
        self.check_post_confession()
        self.check_unauthorized_moderation()
        self.check_admin_login()
        self.check_moderation_flow()
        self.check_chat_rooms()

        return self.print_summary()

    def _make_request(self, method: str, endpoint: str, data: dict = None, token: str = None) -> tuple[int, dict]:
        """Make HTTP request and return status code and response"""
        url = f"{self.base_url}{endpoint}"
        headers = {"X-Session-Token": token} if token else {}
        try:
            resp = requests.request(method, url, json=data, headers=headers, timeout=30)
            return resp.status_code, resp.json() if resp.text else {}
        except requests.exceptions.ConnectionError:
            return 0, {"error": "Connection refused - is the server running?"}
        except requests.exceptions.Timeout:
            return 0, {"error": "Request timed out"}
        except json.JSONDecodeError:
            return resp.status_code, {"error": "Invalid JSON response", "raw": resp.text[:500]}

    def _add_result(self, name: str, passed: bool, message: str, data=None):
        self.results.append(CheckResult(name, passed, message, data))
        status = "PASS" if passed else "FAIL"
        print(f"{status}: {name}")
        if message:
            print(f"       {message}")
        if data and not passed:
            print(f"       Response: {json.dumps(data, indent=2)[:200]}...")

    # ==================== ANONYMOUS USER ====================

    def check_health(self):
        status, data = self._make_request("GET", "/")
        passed = status == 200 and data.get("status") == "online"
        self._add_result("Health Check", passed, "API is online" if passed else f"Got status {status}", data)

    def check_session(self):
        status, data = self._make_request("GET", "/api/session")
        session = data.get("session") or {}
        self.session_token = session.get("token")
        passed = status == 200 and bool(self.session_token) and data.get("isNew") is True
        self._add_result("Issue Session", passed, "New anonymous session issued" if passed else f"Got status {status}", data)

        if self.session_token:
            status, data = self._make_request("PUT", "/api/session", {"collegeCode": "UCLA123"}, self.session_token)
            passed = status == 200 and data.get("collegeCode") == "UCLA123"
            self._add_result("Pick College", passed, "" if passed else f"Got status {status}", data)

    def check_colleges(self):
        status, data = self._make_request("GET", "/api/colleges")
        passed = status == 200 and isinstance(data, list) and len(data) > 0
        self._add_result("List Colleges", passed, f"{len(data)} colleges" if passed else f"Got status {status}", data)

    def check_daily_limit(self):
        status, data = self._make_request("GET", "/api/daily-limit", token=self.session_token)
        passed = status == 200 and data.get("limit") == 5 and data.get("used") == 0
        self._add_result("Daily Limit", passed, f"{data.get('remaining')} remaining" if passed else f"Got status {status}", data)

    def check_post_confession(self):
        status, data = self._make_request("POST", "/api/confessions", {
            "content": SAMPLE_CONFESSION,
            "category": "funny",
            "collegeCode": "UCLA123",
        }, self.session_token)
        self.confession_id = data.get("id")
        passed = status == 200 and data.get("isApproved") is False and data.get("remainingToday") == 4
        self._add_result("Post Confession", passed, "Queued for review" if passed else f"Got status {status}", data)

        status, feed = self._make_request("GET", "/api/confessions?collegeCode=UCLA123")
        hidden = status == 200 and all(c.get("id") != self.confession_id for c in feed)
        self._add_result("Pending Confession Hidden", hidden, "" if hidden else "Pending confession leaked into the feed")

    # ==================== MODERATION ====================

    def check_unauthorized_moderation(self):
        status, data = self._make_request("GET", "/api/admin/confessions/pending", token=self.session_token)
        passed = status == 401
        self._add_result("Unauthorized Moderation", passed, f"Expected 401, got {status}" if not passed else "Rejected", data)

    def check_admin_login(self):
        status, data = self._make_request("POST", "/api/auth/login", {
            "username": ADMIN_USERNAME,
            "password": ADMIN_PASSWORD,
        })
        self.admin_token = data.get("sessionToken")
        passed = status == 200 and bool(self.admin_token)
        self._add_result("Admin Login", passed, "" if passed else f"Got status {status}", data)

    def check_moderation_flow(self):
        if not self.admin_token or not self.confession_id:
            self._add_result("Moderation Flow", False, "Skipped: missing admin token or confession")
            return

        status, data = self._make_request("POST", f"/api/admin/confessions/{self.confession_id}/approve",
                                          token=self.admin_token)
        self._add_result("Approve Confession", status == 200, "" if status == 200 else f"Got status {status}", data)

        status, data = self._make_request("POST", f"/api/confessions/{self.confession_id}/like", token=self.session_token)
        passed = status == 200 and data.get("action") == "liked"
        self._add_result("Like Confession", passed, "" if passed else f"Got status {status}", data)

        # Clean up so repeated runs do not fill the feed
        status, data = self._make_request("DELETE", f"/api/admin/confessions/{self.confession_id}",
                                          token=self.admin_token)
        self._add_result("Delete Confession", status == 200, "" if status == 200 else f"Got status {status}", data)

    def check_chat_rooms(self):
        status, data = self._make_request("GET", "/api/chat/rooms?collegeCode=UCLA123")
        passed = status == 200 and isinstance(data, list) and len(data) > 0
        self._add_result("Chat Rooms", passed, "" if passed else f"Got status {status}", data)

    # ==================== SUMMARY ====================

    def print_summary(self):
        print("\n" + "=" * 60)
        print("CHECK SUMMARY")
        print("=" * 60)

        passed = sum(1 for r in self.results if r.passed)
        failed = sum(1 for r in self.results if not r.passed)
        total = len(self.results)

        print(f"\nTotal: {total} | Passed: {passed} | Failed: {failed}")
        if total:
            print(f"Success Rate: {passed/total*100:.1f}%")

        if failed > 0:
            print("\nFailed Checks:")
            for r in self.results:
                if not r.passed:
                    print(f"  - {r.name}: {r.message}")

        print("\n" + "=" * 60)

        return failed == 0


if __name__ == "__main__":
    checker = ConfessionsLiveChecker()
    sys.exit(0 if checker.run_all_checks() else 1)
