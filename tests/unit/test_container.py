"""
Unit tests for the DI container.

Tests registration, the three lifetime policies, build/freeze semantics
and disposal.
"""

import threading
import time

import pytest
from conftest import Clock, Disposable, Handler, RequestContext

from service_lifetimes.config import ServiceProviderOptions
from service_lifetimes.di import Container, Lifetime
from service_lifetimes.exceptions import (
    ConfigurationError,
    InvalidOperationError,
    MissingScopeError,
    ServiceNotRegisteredError,
)
from service_lifetimes.services import (
    GuidService,
    GuidTrimmer,
    ScopedGuidService,
    SingletonGuidService,
    TransientGuidService,
)


class CycleA:
    def __init__(self, b: "CycleB") -> None:
        self.b = b


class CycleB:
    def __init__(self, a: CycleA) -> None:
        self.a = a


@pytest.mark.unit
class TestRegistration:
    """Test service registration."""

    def test_register_returns_container_for_chaining(self):
        container = Container()
        result = container.register(Clock).register_scoped(RequestContext)
        assert result is container

    def test_register_defaults_to_singleton(self):
        container = Container().register(Clock)
        assert container.lifetime_of(Clock) is Lifetime.SINGLETON

    def test_shorthands_set_lifetime(self):
        container = (
            Container()
            .register_singleton(SingletonGuidService, GuidService)
            .register_scoped(ScopedGuidService, GuidService)
            .register_transient(TransientGuidService, GuidService)
        )
        assert container.lifetime_of(SingletonGuidService) is Lifetime.SINGLETON
        assert container.lifetime_of(ScopedGuidService) is Lifetime.SCOPED
        assert container.lifetime_of(TransientGuidService) is Lifetime.TRANSIENT

    def test_is_registered_and_contains(self, container):
        assert container.is_registered(ScopedGuidService)
        assert ScopedGuidService in container
        assert Clock not in container

    def test_register_after_build_fails(self, container):
        with pytest.raises(InvalidOperationError):
            container.register(Clock)

    def test_build_twice_fails(self, container):
        with pytest.raises(InvalidOperationError):
            container.build()

    def test_first_resolve_builds_with_default_options(self):
        container = Container().register(Clock)
        container.resolve(Clock)
        assert container.is_built
        assert container.options == ServiceProviderOptions()

    def test_registrations_snapshot(self, container):
        registrations = container.registrations()
        assert set(registrations) == {
            SingletonGuidService,
            ScopedGuidService,
            TransientGuidService,
            GuidTrimmer,
        }
        registrations.clear()
        assert container.is_registered(GuidTrimmer)


@pytest.mark.unit
class TestSingletonLifetime:
    """Test singleton resolution."""

    def test_same_instance_every_time(self, container):
        first = container.resolve(SingletonGuidService)
        second = container.resolve(SingletonGuidService)
        assert first is second
        assert first.get_guid() == second.get_guid()

    def test_same_instance_across_scopes(self, container):
        with container.create_scope() as scope_a, container.create_scope() as scope_b:
            a = scope_a.resolve(SingletonGuidService)
            b = scope_b.resolve(SingletonGuidService)
        assert a is b
        assert a is container.resolve(SingletonGuidService)

    def test_value_identical_across_many_scopes(self, container):
        values = set()
        for _ in range(20):
            with container.create_scope() as scope:
                values.add(scope.resolve(SingletonGuidService).get_guid())
        assert len(values) == 1

    def test_isolated_containers_do_not_share(self):
        first = Container().register(SingletonGuidService, GuidService)
        second = Container().register(SingletonGuidService, GuidService)
        assert (
            first.resolve(SingletonGuidService).get_guid()
            != second.resolve(SingletonGuidService).get_guid()
        )

    def test_concurrent_first_resolution_constructs_once(self):
        constructed = []
        barrier = threading.Barrier(8)

        class SlowGuidService(GuidService):
            def __init__(self) -> None:
                constructed.append(self)
                time.sleep(0.01)
                super().__init__()

        container = Container().register(SingletonGuidService, SlowGuidService)
        container.build()
        results = []

        def worker():
            barrier.wait()
            results.append(container.resolve(SingletonGuidService))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(constructed) == 1
        assert all(r is results[0] for r in results)

    def test_register_instance(self):
        guid_service = GuidService()
        container = Container().register_instance(SingletonGuidService, guid_service)
        assert container.resolve(SingletonGuidService) is guid_service
        assert container.lifetime_of(SingletonGuidService) is Lifetime.SINGLETON


@pytest.mark.unit
class TestScopedLifetime:
    """Test scoped resolution."""

    def test_same_instance_within_scope(self, container):
        with container.create_scope() as scope:
            first = scope.resolve(ScopedGuidService)
            second = container.resolve(ScopedGuidService, scope=scope)
        assert first is second
        assert first.get_guid() == second.get_guid()

    def test_different_instance_per_scope(self, container):
        with container.create_scope() as scope_a:
            a = scope_a.resolve(ScopedGuidService).get_guid()
        with container.create_scope() as scope_b:
            b = scope_b.resolve(ScopedGuidService).get_guid()
        assert a != b

    def test_resolve_without_scope_raises(self, container):
        with pytest.raises(MissingScopeError) as exc_info:
            container.resolve(ScopedGuidService)
        assert exc_info.value.service_type is ScopedGuidService

    def test_missing_scope_never_falls_back(self, container):
        with pytest.raises(MissingScopeError):
            container.resolve(GuidTrimmer)
        with pytest.raises(MissingScopeError):
            container.resolve(GuidTrimmer, scope=None)

    def test_missing_scope_is_invalid_operation(self):
        assert issubclass(MissingScopeError, InvalidOperationError)

    def test_scoped_consumer_of_singleton(self, container):
        with container.create_scope() as scope:
            trimmer = scope.resolve(GuidTrimmer)
            assert trimmer.trim() == container.resolve(SingletonGuidService).get_guid()[:8]

    def test_scoped_dependency_shared_within_scope(self):
        container = (
            Container()
            .register(Clock)
            .register_scoped(RequestContext)
            .register_scoped(Handler)
            .build()
        )
        with container.create_scope() as scope:
            handler = scope.resolve(Handler)
            assert handler.context is scope.resolve(RequestContext)
            assert handler.clock is container.resolve(Clock)

    def test_resolve_from_ended_scope_fails(self, container):
        scope = container.create_scope()
        scope.end()
        with pytest.raises(InvalidOperationError):
            container.resolve(ScopedGuidService, scope=scope)


@pytest.mark.unit
class TestTransientLifetime:
    """Test transient resolution."""

    def test_new_instance_every_time(self, container):
        with container.create_scope() as scope:
            first = scope.resolve(TransientGuidService)
            second = scope.resolve(TransientGuidService)
        assert first is not second

    def test_resolvable_without_scope(self, container):
        assert container.resolve(TransientGuidService) is not container.resolve(
            TransientGuidService
        )

    def test_not_cached_in_scope(self, container):
        with container.create_scope() as scope:
            scope.resolve(TransientGuidService)
            assert not scope.owns(TransientGuidService)


@pytest.mark.unit
class TestFactoryRegistration:
    """Test factory providers."""

    def test_scoped_factory_receives_scope(self):
        seen = []

        def create_context(resolver):
            seen.append(resolver)
            return RequestContext()

        container = Container().register_factory(RequestContext, create_context, Lifetime.SCOPED)
        with container.create_scope() as scope:
            first = scope.resolve(RequestContext)
            assert scope.resolve(RequestContext) is first
        assert seen == [scope]

    def test_singleton_factory_called_once(self):
        calls = []

        def create_clock(resolver):
            calls.append(resolver)
            return Clock()

        container = Container().register_factory(Clock, create_clock)
        assert container.resolve(Clock) is container.resolve(Clock)
        assert calls == [container]

    def test_transient_factory_called_every_time(self):
        container = Container().register_factory(
            Clock, lambda resolver: Clock(), Lifetime.TRANSIENT
        )
        assert container.resolve(Clock) is not container.resolve(Clock)

    def test_scoped_factory_without_scope_raises(self):
        container = Container().register_factory(
            RequestContext, lambda resolver: RequestContext(), Lifetime.SCOPED
        )
        with pytest.raises(MissingScopeError):
            container.resolve(RequestContext)


@pytest.mark.unit
class TestResolutionErrors:
    """Test resolution failures."""

    def test_unregistered_raises_key_error(self, container):
        with pytest.raises(ServiceNotRegisteredError) as exc_info:
            container.resolve(Clock)
        assert isinstance(exc_info.value, KeyError)
        assert "Clock" in str(exc_info.value)

    def test_try_resolve_returns_none(self, container):
        assert container.try_resolve(Clock) is None

    def test_singleton_with_scoped_dependency_fails_without_validation(self):
        container = (
            Container()
            .register_scoped(RequestContext)
            .register(Handler, lifetime=Lifetime.SINGLETON)
            .register(Clock)
            .build()
        )
        with container.create_scope() as scope:
            with pytest.raises(MissingScopeError):
                scope.resolve(Handler)

    def test_runtime_cycle_detected(self):
        container = Container().register_transient(CycleA).register_transient(CycleB)
        with pytest.raises(ConfigurationError) as exc_info:
            container.resolve(CycleB)
        assert exc_info.value.chain == [CycleB, CycleA, CycleB]


@pytest.mark.unit
class TestDisposal:
    """Test container disposal."""

    def test_dispose_releases_created_singletons(self):
        container = Container().register(Disposable)
        instance = container.resolve(Disposable)
        container.dispose()
        assert instance.disposed == 1

    def test_dispose_is_idempotent(self):
        container = Container().register(Disposable)
        instance = container.resolve(Disposable)
        container.dispose()
        container.dispose()
        assert instance.disposed == 1

    def test_dispose_skips_uncreated_singletons(self):
        container = Container().register(Disposable).build()
        container.dispose()

    def test_registered_instances_are_not_disposed(self):
        instance = Disposable()
        container = Container().register_instance(Disposable, instance)
        container.resolve(Disposable)
        container.dispose()
        assert instance.disposed == 0

    def test_resolve_after_dispose_fails(self, container):
        container.dispose()
        with pytest.raises(InvalidOperationError):
            container.resolve(SingletonGuidService)
        with pytest.raises(InvalidOperationError):
            container.create_scope()
