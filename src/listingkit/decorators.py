"""Cache decorators for application loaders.

These decorators cache the result of any async loader (a page
handler, a background job) through a configured CacheService, and
clear families of keys after a mutation.
"""

import functools
import inspect
import re
from collections.abc import Callable
from datetime import timedelta
from typing import Any, TypeVar

from listingkit.core.services.cache_service import CacheService

F = TypeVar("F", bound=Callable[..., Any])

# Module-level cache service reference
_cache_service: CacheService | None = None


def configure(cache_service: CacheService | None) -> None:
    """Configure the cache service for decorators.

    Must be called before ``@cached`` or ``@invalidates`` have any
    effect; until then decorated functions run uncached. Pass None to
    detach the decorators again.

    Args:
        cache_service: The cache service instance to use.

    Example:
        cache_service = CacheService(backend=InMemoryCacheBackend())
        configure(cache_service)
    """
    global _cache_service
    _cache_service = cache_service


def get_cache_service() -> CacheService | None:
    """Get the configured cache service.

    Returns:
        The configured cache service, or None if not configured.
    """
    return _cache_service


def cached(
    ttl: timedelta | float | None = None,
    key: str | Callable[..., str] | None = None,
) -> Callable[[F], F]:
    """Decorator for caching async loader results.

    A None result is never cached, so the function runs again next time.

    Args:
        ttl: Time-to-live for cached results. Uses config default if None.
        key: Custom cache key or function to generate key.
            If string, supports {arg_name} interpolation.
            If callable, receives (*args, **kwargs) and returns key string.

    Returns:
        Decorated function.

    Example:
        @cached(ttl=timedelta(hours=1), key="blog_posts_{category}")
        async def blog_posts(category: str) -> list[dict]:
            return await client.query("blog_posts", ...)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            service = _cache_service
            if service is None:
                return await func(*args, **kwargs)

            cache_key = _build_cache_key(service, func, args, kwargs, key)

            hit = await service.get(cache_key)
            if hit is not None:
                return hit

            result = await func(*args, **kwargs)
            if result is not None:
                await service.set(cache_key, result, ttl)
            return result

        return wrapper  # type: ignore

    return decorator


def invalidates(
    keys: list[str] | None = None,
    families: list[str] | None = None,
) -> Callable[[F], F]:
    """Decorator for clearing cache entries after a mutation.

    Executes the decorated function and, only if it returns normally,
    removes the given keys and every key of the given families.

    Args:
        keys: Exact keys to remove. Supports {arg_name} interpolation.
        families: Entity families to clear, e.g. ``["companies"]``.

    Returns:
        Decorated function.

    Example:
        @invalidates(keys=["company_{slug}"], families=["companies"])
        async def approve_company(slug: str) -> None:
            ...
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            result = await func(*args, **kwargs)

            service = _cache_service
            if service is not None:
                bound = _bind(func, args, kwargs)
                for template in keys or []:
                    await service.clear(_interpolate_string(template, bound))
                for family in families or []:
                    await service.clear_family(family)

            return result

        return wrapper  # type: ignore

    return decorator


def _build_cache_key(
    service: CacheService,
    func: Callable[..., Any],
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
    custom_key: str | Callable[..., str] | None,
) -> str:
    """Build cache key for a function call.

    Args:
        service: Cache service whose key builder provides the default.
        func: The function being cached.
        args: Positional arguments.
        kwargs: Keyword arguments.
        custom_key: Custom key or key builder function.

    Returns:
        The cache key string.
    """
    if custom_key is not None:
        if callable(custom_key):
            return custom_key(*args, **kwargs)
        return _interpolate_string(custom_key, _bind(func, args, kwargs))

    return str(
        service.keys.build_function_key(
            module=func.__module__ or "",
            name=func.__name__,
            kwargs=kwargs or None,
            subject=args[0] if args else None,
        )
    )


def _bind(
    func: Callable[..., Any],
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> dict[str, Any]:
    """Map positional and keyword arguments to parameter names."""
    try:
        bound = inspect.signature(func).bind_partial(*args, **kwargs)
    except (TypeError, ValueError):
        return dict(kwargs)
    return dict(bound.arguments)


def _interpolate_string(template: str, values: dict[str, Any]) -> str:
    """Interpolate {arg_name} placeholders in string.

    Unknown placeholders are kept as they are.
    """
    pattern = r"\{(\w+)\}"

    def replacer(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in values:
            return str(values[name])
        return match.group(0)

    return re.sub(pattern, replacer, template)
