"""
TIAC HTTP client
Thin wrapper over the server endpoints. Failure outcomes come back as dicts
with success=False rather than as exceptions; only transport errors raise.
"""

import requests

from service.config import config


class TIACClient:
    """Client for the TIAC server"""

    def __init__(self, base_url: str = None, timeout: float = 30.0):
        self.base_url = base_url or config.url
        self.timeout = timeout

    def health(self) -> dict:
        """Health check"""
        resp = requests.get(f"{self.base_url}/health", timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def setup(self, security_level: int = None) -> dict:
        """Run Setup"""
        data = {}
        if security_level is not None:
            data['security_level'] = security_level
        resp = requests.post(f"{self.base_url}/setup", json=data, timeout=self.timeout)
        return self._outcome(resp)

    def keygen(self, params: dict, num_authorities: int, threshold: int = None) -> dict:
        """Run KeyGen against a previous Setup outcome"""
        resp = requests.post(f"{self.base_url}/keygen", json={
            'params': params,
            'threshold': threshold,
            'num_authorities': num_authorities,
        }, timeout=self.timeout)
        return self._outcome(resp)

    @staticmethod
    def _outcome(resp: requests.Response) -> dict:
        # 4xx/5xx still carry an outcome body; anything else is a transport problem
        try:
            body = resp.json()
        except ValueError:
            resp.raise_for_status()
            raise
        if not isinstance(body, dict) or 'success' not in body:
            resp.raise_for_status()
            raise ValueError(f"unexpected response body from {resp.url}")
        return body
