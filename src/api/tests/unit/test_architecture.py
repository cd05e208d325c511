"""Architecture tests using pytest-archon.

These tests enforce DDD architectural boundaries between layers
within the Identity and Quota bounded contexts.
"""

import pytest
from pytest_archon import archrule

BOUNDED_CONTEXTS = ["identity", "quota"]


@pytest.mark.parametrize("context", BOUNDED_CONTEXTS)
class TestDomainLayerBoundaries:
    """Tests that the domain layer has no forbidden dependencies."""

    def test_domain_does_not_import_outer_layers(self, context):
        """Domain layer should not depend on application or infrastructure.

        The domain layer contains pure business logic: tier limits,
        scheme selection, value objects.
        """
        (
            archrule(f"{context}_domain_no_outer_layers")
            .match(f"{context}.domain*")
            .should_not_import(
                f"{context}.application*",
                f"{context}.infrastructure*",
                "infrastructure*",
            )
            .check(context)
        )

    def test_domain_does_not_import_frameworks(self, context):
        """Domain objects should be framework-agnostic."""
        (
            archrule(f"{context}_domain_no_frameworks")
            .match(f"{context}.domain*")
            .should_not_import("fastapi*", "starlette*", "sqlalchemy*", "structlog*")
            .check(context)
        )


@pytest.mark.parametrize("context", BOUNDED_CONTEXTS)
class TestPortsLayerBoundaries:
    """Tests that the ports layer has no forbidden dependencies."""

    def test_ports_do_not_import_implementations(self, context):
        """Ports define interfaces and must not know their implementations."""
        (
            archrule(f"{context}_ports_no_implementations")
            .match(f"{context}.ports*")
            .should_not_import(f"{context}.infrastructure*", f"{context}.application*")
            .check(context)
        )


@pytest.mark.parametrize("context", BOUNDED_CONTEXTS)
class TestApplicationLayerBoundaries:
    """Tests that the application layer has appropriate dependencies."""

    def test_application_does_not_import_infrastructure(self, context):
        """Application services depend on ports, not on concrete stores
        or verifier builders.
        """
        (
            archrule(f"{context}_application_no_infrastructure")
            .match(f"{context}.application*")
            .should_not_import(f"{context}.infrastructure*", "sqlalchemy*")
            .check(context)
        )

    def test_application_does_not_import_fastapi(self, context):
        """HTTP concerns stay in dependencies and presentation modules."""
        (
            archrule(f"{context}_application_no_fastapi")
            .match(f"{context}.application*")
            .should_not_import("fastapi*", "starlette*")
            .check(context)
        )

    def test_application_can_import_domain_and_ports(self, context):
        """Application layer may import domain and ports."""
        (
            archrule(f"{context}_application_may_import_domain_ports")
            .match(f"{context}.application*")
            .may_import(f"{context}.domain*", f"{context}.ports*")
            .check(context)
        )


class TestInfrastructureLayerBoundaries:
    """Tests that infrastructure has appropriate dependencies."""

    def test_quota_infrastructure_does_not_import_application(self):
        """Stores are used BY the application layer, not vice versa."""
        (
            archrule("quota_infrastructure_no_application")
            .match("quota.infrastructure*")
            .should_not_import("quota.application*")
            .check("quota")
        )

    def test_shared_infrastructure_does_not_import_bounded_contexts(self):
        """Shared infrastructure provides process-wide resources only."""
        (
            archrule("infrastructure_no_bounded_contexts")
            .match("infrastructure*")
            .should_not_import("identity*", "quota*")
            .check("infrastructure")
        )


class TestCrossContextBoundaries:
    """Tests that context boundaries are respected."""

    def test_identity_does_not_import_quota(self):
        """Identity knows nothing about quotas."""
        (
            archrule("identity_no_quota")
            .match("identity*")
            .should_not_import("quota*")
            .check("identity")
        )

    def test_quota_core_does_not_import_identity(self):
        """Only the quota HTTP seam may see the caller's auth context."""
        (
            archrule("quota_core_no_identity")
            .match("quota.domain*", "quota.ports*", "quota.application*")
            .should_not_import("identity*")
            .check("quota")
        )


class TestSharedKernelBoundaries:
    """Tests that Shared Kernel boundaries are properly maintained."""

    def test_shared_kernel_does_not_import_bounded_contexts(self):
        """Shared kernel must not import from bounded contexts."""
        (
            archrule("shared_kernel_no_bounded_contexts")
            .match("shared_kernel*")
            .should_not_import("identity*", "quota*")
            .check("shared_kernel")
        )

    def test_shared_kernel_does_not_import_infrastructure(self):
        """Shared kernel should not import infrastructure layer."""
        (
            archrule("shared_kernel_no_infrastructure")
            .match("shared_kernel*")
            .should_not_import("infrastructure*")
            .check("shared_kernel")
        )

    def test_shared_kernel_does_not_import_fastapi(self):
        """Shared kernel must be framework-agnostic."""
        (
            archrule("shared_kernel_no_fastapi")
            .match("shared_kernel*")
            .should_not_import("fastapi*", "starlette*")
            .check("shared_kernel")
        )
