"""Tests for the route queries."""

from typing import Any

from gateway_deployer.query import InMemoryGatewayQueries


def service(name: str, namespace: str) -> dict[str, Any]:
    """Return a Service object."""
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {"name": name, "namespace": namespace},
    }


def reference_grant(namespace: str, from_namespace: str, **to: str) -> dict[str, Any]:
    """Return a ReferenceGrant allowing HTTPRoutes to refer to Services."""
    return {
        "apiVersion": "gateway.networking.k8s.io/v1beta1",
        "kind": "ReferenceGrant",
        "metadata": {"name": "allow", "namespace": namespace},
        "spec": {
            "from": [
                {
                    "group": "gateway.networking.k8s.io",
                    "kind": "HTTPRoute",
                    "namespace": from_namespace,
                }
            ],
            "to": [{"group": "", "kind": "Service", **to}],
        },
    }


def test_backend_same_namespace() -> None:
    """Test a reference in the route namespace."""
    backend = service("api", "default")
    queries = InMemoryGatewayQueries([service("api", "other"), backend])
    assert queries.get_backend_for_ref("default", {"name": "api"}) is backend
    assert queries.get_backend_for_ref("default", {"name": "missing"}) is None


def test_backend_cross_namespace() -> None:
    """Test a reference to another namespace requires a ReferenceGrant."""
    backend = service("api", "other")
    ref = {"name": "api", "namespace": "other"}

    queries = InMemoryGatewayQueries([backend])
    assert queries.get_backend_for_ref("default", ref) is None

    queries = InMemoryGatewayQueries([backend, reference_grant("other", "default")])
    assert queries.get_backend_for_ref("default", ref) is backend

    # Grant from a different namespace
    queries = InMemoryGatewayQueries([backend, reference_grant("other", "team")])
    assert queries.get_backend_for_ref("default", ref) is None

    # Grant limited to a different Service
    queries = InMemoryGatewayQueries(
        [backend, reference_grant("other", "default", name="web")]
    )
    assert queries.get_backend_for_ref("default", ref) is None


def route_option(name: str, namespace: str, target: str, created: str) -> dict[str, Any]:
    """Return a RouteOption targeting an HTTPRoute."""
    return {
        "apiVersion": "gateway.solo.io/v1",
        "kind": "RouteOption",
        "metadata": {"name": name, "namespace": namespace, "creationTimestamp": created},
        "spec": {"targetRef": {"kind": "HTTPRoute", "name": target}},
    }


def test_route_options_for_route() -> None:
    """Test finding the RouteOptions targeting a route, oldest first."""
    newer = route_option("newer", "default", "example", "2024-02-01T00:00:00Z")
    older = route_option("older", "default", "example", "2024-01-01T00:00:00Z")
    queries = InMemoryGatewayQueries(
        [
            newer,
            route_option("other-route", "default", "other", "2023-01-01T00:00:00Z"),
            route_option("other-namespace", "team", "example", "2023-01-01T00:00:00Z"),
            older,
        ]
    )
    route = {"kind": "HTTPRoute", "metadata": {"name": "example", "namespace": "default"}}
    assert queries.get_route_options_for_route(route) == [older, newer]
