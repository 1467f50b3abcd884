"""Dependency wiring for vnicbox.

The CLI builds one container per invocation. Seams (``HypervisorBackend``,
``GuestConfigurator``) are bound to concrete backends; the core classes
(``InterfaceProvisioner``, ``PostBootConfigPlanner``, ``ProvisioningRun``)
are built on demand from their constructor annotations.
"""

import inspect
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Type, TypeVar, get_type_hints

T = TypeVar("T")


@dataclass
class Provider:
    target: Callable[..., Any]
    shared: bool = True


class DependencyContainer:
    """
    Map seam types to providers and build objects from annotations.

    Usage:
        container = DependencyContainer()
        container.register(HypervisorBackend, factory=lambda: LibvirtBackend(uri))
        container.register(GuestConfigurator, QemuAgentConfigurator)

        run = container.resolve(ProvisioningRun)
    """

    def __init__(self):
        self._providers: Dict[Type, Provider] = {}
        self._instances: Dict[Type, Any] = {}
        self._built: Dict[Type, Any] = {}
        self._lock = threading.RLock()

    def register(
        self,
        interface: Type[T],
        implementation: Optional[Type[T]] = None,
        factory: Optional[Callable[..., T]] = None,
        singleton: bool = True,
        instance: Optional[T] = None,
    ) -> "DependencyContainer":
        with self._lock:
            self._instances.pop(interface, None)
            self._providers.pop(interface, None)
            self._built.pop(interface, None)

            if instance is not None:
                self._instances[interface] = instance
            elif factory is not None:
                self._providers[interface] = Provider(factory, shared=singleton)
            elif implementation is not None:
                self._providers[interface] = Provider(implementation, shared=singleton)
            else:
                raise ValueError(f"Nothing to register for {interface.__name__}")
        return self

    def has(self, interface: Type) -> bool:
        return interface in self._instances or interface in self._providers

    def resolve(self, interface: Type[T]) -> T:
        with self._lock:
            if interface in self._instances:
                return self._instances[interface]
            if interface in self._built:
                return self._built[interface]

            provider = self._providers.get(interface)
            if provider is None:
                if inspect.isclass(interface) and not inspect.isabstract(interface):
                    return self.build(interface)
                raise KeyError(f"Nothing registered for {interface}")

            obj = self.build(provider.target)
            if provider.shared:
                self._built[interface] = obj
            return obj

    def build(self, target: Callable[..., T]) -> T:
        """Call ``target``, filling required or registered class-typed parameters."""
        try:
            params = inspect.signature(target).parameters
            hints = get_type_hints(target.__init__ if inspect.isclass(target) else target)
        except (TypeError, ValueError):
            return target()

        kwargs = {}
        for name, param in params.items():
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            hint = hints.get(name)
            if not inspect.isclass(hint):
                continue
            if self.has(hint) or param.default is param.empty:
                kwargs[name] = self.resolve(hint)
        return target(**kwargs)


def create_default_container(uri: Optional[str] = None) -> DependencyContainer:
    """Container with the libvirt backend and the QEMU guest agent configurator."""
    from .backends.guest_agent import QemuAgentConfigurator
    from .backends.libvirt_backend import LibvirtBackend
    from .interfaces.guest import GuestConfigurator
    from .interfaces.hypervisor import HypervisorBackend

    container = DependencyContainer()
    container.register(HypervisorBackend, factory=lambda: LibvirtBackend(uri=uri))
    container.register(GuestConfigurator, QemuAgentConfigurator)
    return container
