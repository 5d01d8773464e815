"""HTTP reachability probes for services that publish a port."""

import ipaddress
import time

import httpx

from .models import EndpointProbe


def endpoint_url(host: str, port: int) -> str:
    """``http://host:port/``, with IPv6 literals in brackets."""
    try:
        if ipaddress.ip_address(host).version == 6:
            host = f"[{host}]"
    except ValueError:
        pass
    return f"http://{host}:{int(port)}/"


def probe_endpoint(host: str, port: int, timeout_s: float = 3.0) -> EndpointProbe:
    """GET ``http://host:port/`` and report whether anything answered.

    Any HTTP response counts as reachable; the status code is kept as detail.
    """
    url = endpoint_url(host, port)
    start = time.time()
    try:
        with httpx.Client(timeout=timeout_s, follow_redirects=False) as client:
            resp = client.get(url)
        latency_ms = round((time.time() - start) * 1000.0, 2)
        return EndpointProbe(url, True, f"HTTP {resp.status_code}", latency_ms)
    except (httpx.ConnectError, httpx.TimeoutException):
        return EndpointProbe(url, False, "No response")
    except httpx.InvalidURL as e:
        return EndpointProbe(url, False, f"Invalid URL: {e}")
    except httpx.HTTPError as e:
        return EndpointProbe(url, False, f"Error: {type(e).__name__}: {e}")
