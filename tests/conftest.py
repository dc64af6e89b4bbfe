"""Shared test fixtures for all tests."""

import logging

import pytest

from autoinject.core.config import RuntimeInjectionSpec
from autoinject.core.log_config import HANDLER_NAME
from autoinject.core.models import Container, EnvVar, Pod, PodSpec
from autoinject.core.runtimes import RequiredEnvVar, RuntimeProfile, reset_runtimes


@pytest.fixture(autouse=True)
def _restore_runtimes_and_logging():
    """Undo runtime registrations and installed log handlers after each test."""
    root = logging.getLogger()
    level = root.level
    yield
    reset_runtimes()
    root.setLevel(level)
    for handler in list(root.handlers):
        if handler.get_name() == HANDLER_NAME:
            root.removeHandler(handler)


@pytest.fixture
def empty_pod():
    """Create a pod with one bare container."""
    return Pod(
        metadata={"name": "checkout"},
        spec=PodSpec(containers=[Container(name="app", image="checkout:1.0")]),
    )


@pytest.fixture
def two_container_pod():
    """Create a pod with two bare containers."""
    return Pod(
        metadata={"name": "checkout"},
        spec=PodSpec(containers=[
            Container(name="app", image="checkout:1.0"),
            Container(name="worker", image="checkout-worker:1.0"),
        ]),
    )


@pytest.fixture
def runtime_spec():
    """Create a runtime spec without user-declared env vars."""
    return RuntimeInjectionSpec(image="registry.local/autoinstrumentation:1.0")


@pytest.fixture
def three_var_profile():
    """Create a profile with two plain and one concatenating variable."""
    return RuntimeProfile(
        name="demo",
        env=(
            RequiredEnvVar("DEMO_ENABLED", "1"),
            RequiredEnvVar("DEMO_HOME", "/otel-auto-instrumentation"),
            RequiredEnvVar("DEMO_PATH", "/otel-auto-instrumentation/lib", concatenate=True),
        ),
    )


@pytest.fixture
def secret_ref():
    """Create a valueFrom reference to a secret key."""
    return {"secretKeyRef": {"name": "profiler", "key": "id"}}


@pytest.fixture
def pod_manifest():
    """Create a pod manifest as decoded from the admission request."""
    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {"name": "checkout", "labels": {"app": "checkout"}},
        "spec": {
            "serviceAccountName": "checkout",
            "containers": [
                {
                    "name": "app",
                    "image": "checkout:1.0",
                    "ports": [{"containerPort": 8080}],
                    "env": [
                        {"name": "ASPNETCORE_URLS", "value": "http://+:8080"},
                        {
                            "name": "DB_PASSWORD",
                            "valueFrom": {"secretKeyRef": {"name": "db", "key": "password"}},
                        },
                    ],
                    "volumeMounts": [{"name": "config", "mountPath": "/etc/app", "readOnly": True}],
                },
                {"name": "sidecar", "image": "envoy:1.27"},
            ],
            "volumes": [{"name": "config", "configMap": {"name": "checkout-config"}}],
        },
    }


@pytest.fixture
def user_env():
    """Create user-declared env vars from the Instrumentation resource."""
    return [
        EnvVar(name="OTEL_SERVICE_NAME", value="checkout"),
        EnvVar(name="OTEL_EXPORTER_OTLP_ENDPOINT", value="http://collector:4318"),
    ]
