"""
Pytest configuration and shared fixtures for testing.
"""

import io
import json
import threading
from datetime import datetime, timezone

import pytest

from instance_reaper.cloudfoundry.models import Service, ServiceInstance, ServicePlan
from instance_reaper.core.channel import Channel
from instance_reaper.reporters.report_writer import ReportWriter

API_URL = "https://api.example.com"
ACCESS_TOKEN = "test-access-token"

FROZEN_NOW = datetime(2018, 1, 2, 12, 0, 0, tzinfo=timezone.utc)


def frozen_time():
    """Clock that always returns FROZEN_NOW."""
    return FROZEN_NOW


# =============================================================================
# Resource builders
# =============================================================================


def service_resource(guid, created_at="2017-01-01T00:00:00Z"):
    return {"metadata": {"guid": guid, "created_at": created_at}, "entity": {}}


def plan_resource(guid, name, free=True, created_at="2017-01-01T00:00:00Z"):
    return {
        "metadata": {"guid": guid, "created_at": created_at},
        "entity": {"name": name, "free": free},
    }


def instance_resource(guid, name, created_at):
    return {
        "metadata": {"guid": guid, "created_at": created_at},
        "entity": {"name": name},
    }


def list_response(resources, next_url=None):
    return {"next_url": next_url, "resources": resources}


def make_service(guid):
    return Service.from_dict(service_resource(guid))


def make_plan(guid, name, free=True):
    return ServicePlan.from_dict(plan_resource(guid, name, free))


def make_instance(guid, name, created_at):
    return ServiceInstance.from_dict(instance_resource(guid, name, created_at))


# =============================================================================
# Fake transport
# =============================================================================


class FakeBody:
    """Response body double; ``error`` makes ``read`` fail."""

    def __init__(self, content=b"", error=None):
        self.content = content
        self.error = error
        self.closed = False

    def read(self):
        self.closed = True
        if self.error:
            raise OSError(self.error)
        return self.content

    def close(self):
        self.closed = True


class FakeAuthClient:
    """
    Stands in for AuthenticatedClient.

    GET answers are registered per URL; unknown URLs answer 404. DELETE
    answers 204 unless a status or exception is registered.
    """

    def __init__(self):
        self.get_answers = {}
        self.delete_answers = {}
        self.get_calls = []
        self.delete_calls = []
        self._lock = threading.Lock()

    def add_json(self, url, document, status=200):
        self.get_answers[url] = ("body", json.dumps(document).encode(), status)

    def add_raw(self, url, content, status=200):
        self.get_answers[url] = ("body", content, status)

    def add_unreadable(self, url, message="connection reset"):
        self.get_answers[url] = ("unreadable", message, 200)

    def add_missing_body(self, url, status=200):
        self.get_answers[url] = ("missing", None, status)

    def add_get_error(self, url, error):
        self.get_answers[url] = ("raise", error, None)

    def set_delete(self, url, answer):
        self.delete_answers[url] = answer

    def do_authenticated_get(self, url, access_token):
        with self._lock:
            self.get_calls.append((url, access_token))
        kind, value, status = self.get_answers.get(url, ("missing", None, 404))
        if kind == "raise":
            raise value
        if kind == "missing":
            return None, status
        if kind == "unreadable":
            return FakeBody(error=value), status
        return FakeBody(value), status

    def do_authenticated_delete(self, url, access_token):
        with self._lock:
            self.delete_calls.append((url, access_token))
        answer = self.delete_answers.get(url, 204)
        if isinstance(answer, Exception):
            raise answer
        return answer


# =============================================================================
# Fake API client
# =============================================================================


class FakeCloudFoundryClient:
    """
    Stands in for CloudFoundryClient in pipeline tests.

    Attributes set by tests:
        services: result (or exception) of list_services_by_name
        plans: service id -> result (or exception) of list_plans
        instances: plan id -> instances streamed for that plan
        stream_errors: plan id -> error sent on the plan's error channel
        delete_errors: instance id -> exception raised by delete_instance
    """

    def __init__(self):
        self.services = []
        self.plans = {}
        self.instances = {}
        self.stream_errors = {}
        self.delete_errors = {}
        self.list_services_calls = []
        self.list_plans_calls = []
        self.stream_instances_calls = []
        self.delete_calls = []
        self._lock = threading.Lock()

    def list_services_by_name(self, service_name):
        self.list_services_calls.append(service_name)
        if isinstance(self.services, Exception):
            raise self.services
        return list(self.services)

    def list_plans(self, service_id):
        self.list_plans_calls.append(service_id)
        plans = self.plans.get(service_id, [])
        if isinstance(plans, Exception):
            raise plans
        return list(plans)

    def stream_instances(self, plan_id):
        self.stream_instances_calls.append(plan_id)
        items = Channel()
        errors = Channel()
        for instance in self.instances.get(plan_id, []):
            items.put(instance)
        items.close()
        if plan_id in self.stream_errors:
            errors.put(self.stream_errors[plan_id])
        errors.close()
        return items, errors

    def delete_instance(self, instance_id, recursive):
        with self._lock:
            self.delete_calls.append((instance_id, recursive))
        if instance_id in self.delete_errors:
            raise self.delete_errors[instance_id]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake_auth_client():
    """A fake authenticated transport."""
    return FakeAuthClient()


@pytest.fixture
def fake_cf_client():
    """A fake API client with no services."""
    return FakeCloudFoundryClient()


@pytest.fixture
def report_writer():
    """A ReportWriter capturing lines in memory."""
    return ReportWriter(io.StringIO())
