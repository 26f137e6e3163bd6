"""GitHub REST API client."""

import time
from typing import Any, Callable, Optional
from urllib.parse import quote

import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from deadwood.errors import GitHubError

GITHUB_API = "https://api.github.com"
API_VERSION = "2022-11-28"
PER_PAGE = 100
HTTP_TIMEOUT_SECS = 30
MAX_RETRIES = 3
RETRY_BASE_DELAY = 1.0
MAX_RETRY_DELAY = 30.0

RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})


class _RetryableResponse(Exception):
    """A rate limit or server error response worth another attempt."""

    def __init__(self, response: requests.Response) -> None:
        super().__init__(f"HTTP {response.status_code}")
        self.response = response


class GitHubClient:
    """Thin wrapper over the handful of endpoints the cleaner needs.

    Every request carries a timeout. Connection failures, timeouts, rate
    limiting and server errors are retried with exponential backoff before
    a GitHubError is raised.
    """

    def __init__(
        self,
        token: str,
        api_url: str = GITHUB_API,
        timeout: float = HTTP_TIMEOUT_SECS,
        max_retries: int = MAX_RETRIES,
        backoff: float = RETRY_BASE_DELAY,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff = backoff
        self.sleep = sleep
        self.session = session if session is not None else requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "X-GitHub-Api-Version": API_VERSION,
                "User-Agent": "deadwood",
            }
        )

    def _send(self, method: str, url: str, params: Optional[dict[str, Any]]) -> requests.Response:
        response = self.session.request(method, url, params=params, timeout=self.timeout)
        if response.status_code in RETRY_STATUSES:
            raise _RetryableResponse(response)
        return response

    def _request(self, method: str, path: str, params: Optional[dict[str, Any]] = None) -> requests.Response:
        """Send one API request, retrying transient failures.

        When retries run out on a rate limit or server error the last
        response is returned so its message can be reported.
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.backoff, max=MAX_RETRY_DELAY),
            retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout, _RetryableResponse)),
            sleep=self.sleep,
            reraise=True,
        )
        try:
            return retrying(self._send, method, f"{self.api_url}{path}", params)
        except _RetryableResponse as err:
            return err.response
        except requests.RequestException as err:
            raise GitHubError(f"{method} {path} failed: {err}") from err

    @staticmethod
    def _payload(response: requests.Response) -> Any:
        """Decode a JSON body, raising GitHubError for error responses."""
        try:
            data = response.json()
        except ValueError:
            data = None

        if isinstance(data, dict) and "message" in data and not response.ok:
            raise GitHubError(str(data["message"]), status=response.status_code)
        if not response.ok:
            raise GitHubError(f"HTTP {response.status_code}", status=response.status_code)
        if data is None:
            raise GitHubError("Response is not JSON", status=response.status_code)
        return data

    @staticmethod
    def _repo_path(owner: str, name: str) -> str:
        return f"/repos/{quote(owner, safe='')}/{quote(name, safe='')}"

    def list_branches(self, owner: str, name: str, page: int = 1, per_page: int = PER_PAGE) -> list[dict[str, Any]]:
        """One page of the branch listing."""
        response = self._request(
            "GET",
            f"{self._repo_path(owner, name)}/branches",
            params={"per_page": per_page, "page": page},
        )
        data = self._payload(response)
        if not isinstance(data, list):
            raise GitHubError("Unexpected branch listing payload", status=response.status_code)
        return data

    def commit_details(self, owner: str, name: str, sha: str) -> dict[str, Any]:
        """Full commit object, used when a branch entry carries only the sha."""
        response = self._request("GET", f"{self._repo_path(owner, name)}/commits/{quote(sha, safe='')}")
        data = self._payload(response)
        if not isinstance(data, dict):
            raise GitHubError("Unexpected commit payload", status=response.status_code)
        return data

    def open_pull_requests(self, owner: str, name: str, branch: str) -> list[dict[str, Any]]:
        """Open pull requests whose head is ``owner:branch``."""
        response = self._request(
            "GET",
            f"{self._repo_path(owner, name)}/pulls",
            params={"state": "open", "head": f"{owner}:{branch}", "per_page": PER_PAGE},
        )
        data = self._payload(response)
        if not isinstance(data, list):
            raise GitHubError("Unexpected pull request payload", status=response.status_code)
        return data

    def delete_branch(self, owner: str, name: str, branch: str) -> bool:
        """Delete ``refs/heads/<branch>``.

        A ref that is already gone counts as deleted.
        """
        response = self._request("DELETE", f"{self._repo_path(owner, name)}/git/refs/heads/{quote(branch, safe='/')}")
        if response.status_code == 204:
            return True
        if response.status_code in (404, 422):
            try:
                message = str(response.json().get("message", ""))
            except (ValueError, AttributeError):
                message = ""
            return response.status_code == 404 or "does not exist" in message.lower()
        return False
