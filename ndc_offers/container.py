"""Dependency injection container.

This module provides a simple DI container without external frameworks.
It allows registering and resolving dependencies for the offer engine.

Design principles:
1. No magic - explicit registration and resolution
2. Testable - easy to swap implementations
3. Lazy loading - adapters instantiated on first use
4. Thread-safe - for web server contexts

The engine performs no I/O, so the default container does not bind
PriceGatewayPort. Hosts register their transport before resolving
PricingService.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, TypeVar

from .config import AppConfig, get_config

T = TypeVar("T")


@dataclass
class Container:
    """Dependency injection container.

    Usage:
        # Production
        container = Container.create_default()
        container.register(PriceGatewayPort, lambda: HttpGateway(...))
        pricing = container.resolve(PricingService)

        # Seat SSRs from a service list
        services = container.resolve(ServiceListNormalizer).normalize(reader)
        solver = container.resolve(SeatSolverPort).with_catalog(services.ssr_catalog)

        # Testing
        container = Container()
        container.register(PriceGatewayPort, lambda: Mock())
        gateway = container.resolve(PriceGatewayPort)

    Attributes:
        config: Application configuration
    """

    config: AppConfig = field(default_factory=get_config)

    _factories: Dict[type[Any], Callable[[], Any]] = field(
        default_factory=dict, repr=False
    )
    _singletons: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _singleton_types: set[type[Any]] = field(default_factory=set, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Register a factory for a port type.

        Args:
            port_type: The type (usually a Protocol) to register.
            factory: A callable that creates instances of the type.
            singleton: If True, only one instance is created.
        """
        with self._lock:
            self._factories[port_type] = factory
            self._singletons.pop(port_type, None)
            if singleton:
                self._singleton_types.add(port_type)
            else:
                self._singleton_types.discard(port_type)

    def resolve(self, port_type: type[Any]) -> Any:
        """Resolve an instance of a port type.

        Raises:
            KeyError: If the type is not registered.
        """
        with self._lock:
            if port_type not in self._factories:
                raise KeyError(f"Type not registered: {port_type}")

            if port_type in self._singleton_types:
                if port_type not in self._singletons:
                    self._singletons[port_type] = self._factories[port_type]()
                return self._singletons[port_type]

            return self._factories[port_type]()

    def is_registered(self, port_type: type[Any]) -> bool:
        return port_type in self._factories

    def clear_singletons(self) -> None:
        """Clear all cached singletons.

        Call this in tests to ensure fresh instances.
        """
        with self._lock:
            self._singletons.clear()

    def clear_all(self) -> None:
        """Clear all registrations and singletons."""
        with self._lock:
            self._factories.clear()
            self._singletons.clear()
            self._singleton_types.clear()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Create a container with default bindings.

        Every engine component is registered. PricingService resolves
        only after the host registers a PriceGatewayPort.

        Args:
            config: Optional configuration override.

        Returns:
            A configured Container instance.
        """
        from .adapters.document import LxmlDocumentParser
        from .adapters.rendering import OfferPriceXmlRenderer
        from .adapters.seating import TieredSeatSolver
        from .ports.document import DocumentParserPort
        from .ports.gateway import PriceGatewayPort
        from .ports.rendering import RequestRendererPort
        from .ports.seating import SeatSolverPort
        from .services import (
            BundleReconciler,
            OfferParser,
            PriceRequestBuilder,
            PriceResponseNormalizer,
            PricingService,
            SeatAvailabilityNormalizer,
            ServiceListNormalizer,
            ShoppingResponseNormalizer,
        )

        config = config or get_config()
        container = cls(config=config)

        # Documents
        container.register(DocumentParserPort, lambda: LxmlDocumentParser())

        # Normalization
        container.register(BundleReconciler, lambda: BundleReconciler(config.matching))
        container.register(
            OfferParser,
            lambda: OfferParser(
                config=config.parsing,
                reconciler=container.resolve(BundleReconciler),
            ),
        )
        container.register(
            ShoppingResponseNormalizer,
            lambda: ShoppingResponseNormalizer(
                config=config.parsing,
                offer_parser=container.resolve(OfferParser),
            ),
        )
        container.register(
            SeatAvailabilityNormalizer,
            lambda: SeatAvailabilityNormalizer(config.parsing),
        )
        container.register(
            PriceResponseNormalizer,
            lambda: PriceResponseNormalizer(config.parsing),
        )
        container.register(
            ServiceListNormalizer,
            lambda: ServiceListNormalizer(
                config=config.parsing,
                shopping=container.resolve(ShoppingResponseNormalizer),
            ),
        )

        # Seating. Hosts bind a service list catalog with
        # resolve(SeatSolverPort).with_catalog(service_list.ssr_catalog).
        container.register(SeatSolverPort, lambda: TieredSeatSolver(config.seating))

        # Request construction and rendering
        container.register(PriceRequestBuilder, lambda: PriceRequestBuilder(config.request))
        container.register(
            RequestRendererPort,
            lambda: OfferPriceXmlRenderer(config.request),
        )

        # Main service
        def create_pricing_service() -> PricingService:
            return PricingService(
                builder=container.resolve(PriceRequestBuilder),
                renderer=container.resolve(RequestRendererPort),
                gateway=container.resolve(PriceGatewayPort),
                parser=container.resolve(DocumentParserPort),
                normalizer=container.resolve(PriceResponseNormalizer),
            )

        container.register(PricingService, create_pricing_service)

        return container


# Global default container (lazy initialized)
_default_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get the default application container.

    Returns:
        The default Container instance (creates one if needed).
    """
    global _default_container
    if _default_container is None:
        with _container_lock:
            if _default_container is None:
                _default_container = Container.create_default()
    return _default_container


def reset_container() -> None:
    """Reset the default container.

    Call this in tests to ensure a fresh container.
    """
    global _default_container
    with _container_lock:
        if _default_container is not None:
            _default_container.clear_all()
        _default_container = None
