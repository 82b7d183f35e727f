#!/usr/bin/env python3
"""Smoke test suite for a running kiosk server.

Skipped unless KIOSK_URL points at a live server, e.g.
KIOSK_URL=http://localhost:3000 pytest tests/test_live_server.py
"""

import asyncio
import logging
import os
import sys
import time
from typing import Any, Dict, List

import aiohttp
import psutil
import pytest


class KioskSmokeSuite:
    """Checks a deployed kiosk server end to end."""

    def __init__(self, base_url: str):
        """Initialize test suite."""
        self.base_url = base_url.rstrip("/")
        self.logger = logging.getLogger(__name__)

    async def test_pages(self) -> Dict[str, Any]:
        """Test display and admin pages."""
        self.logger.info("Testing pages...")

        results = {
            "test_name": "pages",
            "passed": True,
            "details": {},
            "errors": []
        }

        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=30)) as session:
            for endpoint in ("/", "/admin", "/assets/kiosk.js", "/assets/kiosk.css"):
                try:
                    async with session.get(f"{self.base_url}{endpoint}") as response:
                        results["details"][endpoint] = {"status_code": response.status}
                        if response.status >= 400:
                            results["passed"] = False
                            results["errors"].append(f"Endpoint {endpoint} returned {response.status}")

                except aiohttp.ClientError as e:
                    results["passed"] = False
                    results["errors"].append(f"Failed to access {endpoint}: {e}")

        return results

    async def test_api_endpoints(self) -> Dict[str, Any]:
        """Test read-only API endpoints return JSON."""
        self.logger.info("Testing API endpoints...")

        results = {
            "test_name": "api_endpoints",
            "passed": True,
            "details": {},
            "errors": []
        }

        endpoints = ["/health", "/kiosk", "/kiosk/data", "/kiosk/playlist", "/global-settings", "/themes", "/kiosk.json"]

        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=30)) as session:
            for endpoint in endpoints:
                try:
                    async with session.get(f"{self.base_url}{endpoint}") as response:
                        details = {"status_code": response.status}
                        if response.status == 200:
                            data = await response.json()
                            details["response_size"] = len(str(data))
                        else:
                            results["passed"] = False
                            results["errors"].append(f"API endpoint {endpoint} returned {response.status}")
                        results["details"][endpoint] = details

                except (aiohttp.ClientError, ValueError) as e:
                    results["passed"] = False
                    results["errors"].append(f"Failed to access API {endpoint}: {e}")

        return results

    async def test_rejects_short_slide(self) -> Dict[str, Any]:
        """A slide shorter than the minimum time must be refused without changing data."""
        self.logger.info("Testing slide validation...")

        results = {
            "test_name": "slide_validation",
            "passed": True,
            "details": {},
            "errors": []
        }

        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=30)) as session:
            try:
                async with session.get(f"{self.base_url}/kiosk") as response:
                    before = await response.json()

                payload = {"text": "smoke test", "time": 1000}
                async with session.post(f"{self.base_url}/kiosk", json=payload) as response:
                    results["details"]["status_code"] = response.status
                    if response.status != 400:
                        results["passed"] = False
                        results["errors"].append(f"Short slide accepted with status {response.status}")

                async with session.get(f"{self.base_url}/kiosk") as response:
                    if await response.json() != before:
                        results["passed"] = False
                        results["errors"].append("Slide list changed after a rejected create")

            except (aiohttp.ClientError, ValueError) as e:
                results["passed"] = False
                results["errors"].append(f"Slide validation test failed: {e}")

        return results

    async def test_system_resources(self) -> Dict[str, Any]:
        """Test the host has room for uploads."""
        self.logger.info("Testing system resources...")

        results = {
            "test_name": "system_resources",
            "passed": True,
            "details": {},
            "errors": []
        }

        memory = psutil.virtual_memory()
        results["details"]["memory"] = {
            "available_mb": memory.available // 1024 // 1024,
            "usage_percent": memory.percent
        }

        disk = psutil.disk_usage('/')
        results["details"]["disk"] = {
            "free_gb": disk.free // 1024 // 1024 // 1024,
            "usage_percent": (disk.used / disk.total) * 100
        }

        if disk.free < 100 * 1024 * 1024:  # Less than 100MB free
            results["errors"].append("Low disk space")
            results["passed"] = False

        return results

    async def run_all_tests(self) -> Dict[str, Any]:
        """Run all smoke tests."""
        self.logger.info(f"Starting smoke tests against {self.base_url}")

        suite_results = {
            "start_time": time.time(),
            "tests": [],
            "summary": {"total": 0, "passed": 0, "failed": 0}
        }

        test_methods = [
            self.test_pages,
            self.test_api_endpoints,
            self.test_rejects_short_slide,
            self.test_system_resources
        ]

        for test_method in test_methods:
            result = await test_method()
            suite_results["tests"].append(result)
            suite_results["summary"]["total"] += 1

            if result["passed"]:
                suite_results["summary"]["passed"] += 1
                self.logger.info(f"✓ {result['test_name']} PASSED")
            else:
                suite_results["summary"]["failed"] += 1
                self.logger.error(f"✗ {result['test_name']} FAILED: {result['errors']}")

        suite_results["end_time"] = time.time()
        suite_results["duration"] = suite_results["end_time"] - suite_results["start_time"]
        return suite_results

    def generate_report(self, results: Dict[str, Any]) -> str:
        """Generate a plain text report."""
        lines: List[str] = [
            "Kiosk Server Smoke Test Report",
            "=" * 40,
            f"Target: {self.base_url}",
            f"Duration: {results['duration']:.2f} seconds",
            f"Passed: {results['summary']['passed']}/{results['summary']['total']}",
            ""
        ]

        for test in results["tests"]:
            status = "PASS" if test["passed"] else "FAIL"
            lines.append(f"[{status}] {test['test_name']}")
            for error in test["errors"]:
                lines.append(f"    - {error}")

        return "\n".join(lines)


KIOSK_URL = os.environ.get("KIOSK_URL")

live = pytest.mark.skipif(not KIOSK_URL, reason="KIOSK_URL not set")


@pytest.fixture
def smoke_suite():
    """Suite bound to the server under test."""
    return KioskSmokeSuite(KIOSK_URL)


@live
@pytest.mark.asyncio
async def test_pages(smoke_suite):
    """Pages and assets are served."""
    result = await smoke_suite.test_pages()
    assert result["passed"], result["errors"]


@live
@pytest.mark.asyncio
async def test_api_endpoints(smoke_suite):
    """Read endpoints answer with JSON."""
    result = await smoke_suite.test_api_endpoints()
    assert result["passed"], result["errors"]


@live
@pytest.mark.asyncio
async def test_rejects_short_slide(smoke_suite):
    """Short slides are refused."""
    result = await smoke_suite.test_rejects_short_slide()
    assert result["passed"], result["errors"]


async def main():
    """Main test runner."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    suite = KioskSmokeSuite(KIOSK_URL or "http://localhost:3000")
    results = await suite.run_all_tests()
    print(suite.generate_report(results))

    sys.exit(1 if results["summary"]["failed"] > 0 else 0)


if __name__ == "__main__":
    asyncio.run(main())
