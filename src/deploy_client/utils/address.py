"""Instance address normalization."""

import httpx

from deploy_client.core.exceptions import AddressError


def normalize_instance(instance: str) -> httpx.URL:
    """Parse a remote instance address, defaulting the scheme to http.

    Accepts ``host:port``, ``http://host:port`` and ``https://host/prefix``.

    Raises:
        AddressError: If the address is empty or cannot be parsed
    """
    instance = (instance or "").strip()
    if not instance:
        raise AddressError("instance address is empty")
    if "://" not in instance:
        instance = "http://" + instance
    try:
        url = httpx.URL(instance)
    except (httpx.InvalidURL, ValueError) as e:
        raise AddressError(f"invalid instance address {instance!r}: {e}") from e
    if url.scheme not in ("http", "https") or not url.host:
        raise AddressError(f"invalid instance address {instance!r}")
    return url


def operation_url(base: httpx.URL, path: str) -> httpx.URL:
    """Join an operation path onto the base address, keeping any base prefix."""
    prefix = base.path.rstrip("/")
    return base.copy_with(path=prefix + path)
