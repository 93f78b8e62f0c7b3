"""
Service Registry - Central management of application services
Implements dependency injection and lazy loading patterns
"""
from typing import Any, Callable, Dict, List, Optional


class ServiceRegistry:
    """
    Centralized registry for application services.
    Supports dependency injection and lazy loading.
    """

    def __init__(self):
        self._services: Dict[str, Any] = {}
        self._factories: Dict[str, Callable] = {}
        self._dependencies: Dict[str, List[str]] = {}

    def register(self, name: str, service: Any) -> None:
        """
        Register a service instance directly.

        Args:
            name: Service identifier
            service: Service instance
        """
        self._services[name] = service

    def register_factory(self, name: str, factory: Callable,
                         dependencies: Optional[List[str]] = None) -> None:
        """
        Register a factory function for lazy service instantiation.

        Args:
            name: Service identifier
            factory: Callable that returns a service instance; called with
                each dependency as a keyword argument
            dependencies: Names of services the factory needs
        """
        self._factories[name] = factory
        self._dependencies[name] = list(dependencies or [])

    def get(self, name: str, _resolving: Optional[tuple] = None) -> Any:
        """
        Get a service by name. Lazy loads if factory is registered.

        Raises:
            ValueError: If service is not registered or dependencies are circular
        """
        if name in self._services:
            return self._services[name]

        if name not in self._factories:
            raise ValueError(f"Service '{name}' is not registered")

        resolving = _resolving or ()
        if name in resolving:
            raise ValueError(f"Circular dependency: {' -> '.join(resolving + (name,))}")

        kwargs = {dep: self.get(dep, resolving + (name,)) for dep in self._dependencies[name]}
        self._services[name] = self._factories[name](**kwargs)
        return self._services[name]
