"""Balance provider registry with auto-registration pattern."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class BalanceProviderInterface(Protocol):
    """
    Interface that all balance providers must implement.

    Attributes
    ----------
    name : str
        Unique provider identifier (e.g., 'evm', 'cex')
    description : str
        Human-readable description of the source class

    Methods
    -------
    fetch(tokens)
        Fetch balance records for the configured token definitions

    """

    name: str
    description: str

    def fetch(self, tokens: list[Any]) -> list[Any]:
        """
        Fetch balance records for the given token definitions.

        Parameters
        ----------
        tokens : list[TokenDefinition]
            Configured token definitions

        Returns
        -------
        list[BalanceRecord]
            Records found, never raising for a single wallet or account failure

        """
        ...


class ProviderRegistry:
    """
    Registry for balance provider classes with auto-registration.

    Providers register themselves using the @ProviderRegistry.register decorator.
    Registration order is preserved and is the default invocation order.

    """

    _providers: dict[str, type] = {}

    @classmethod
    def register(cls, provider_class: type) -> type:
        """
        Decorator to register a balance provider.

        Parameters
        ----------
        provider_class : type
            Provider class to register

        Returns
        -------
        type
            The provider class (for decorator chaining)

        Examples
        --------
        >>> @ProviderRegistry.register
        ... class BitcoinProvider(BaseBalanceProvider):
        ...     name = "bitcoin"

        """
        if not getattr(provider_class, "name", ""):
            msg = f"Provider {provider_class.__name__} must define 'name' attribute"
            raise ValueError(msg)

        cls._providers[provider_class.name] = provider_class
        return provider_class

    @classmethod
    def get_provider(cls, name: str) -> type | None:
        """
        Get provider class by name.

        Parameters
        ----------
        name : str
            Provider identifier

        Returns
        -------
        type | None
            Provider class or None if not found

        """
        return cls._providers.get(name)

    @classmethod
    def get_all_providers(cls) -> list[type]:
        """Get all registered provider classes in registration order."""
        return list(cls._providers.values())

    @classmethod
    def list_providers(cls) -> list[str]:
        """Get list of all registered provider names."""
        return list(cls._providers.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear all registered providers (useful for testing)."""
        cls._providers.clear()
